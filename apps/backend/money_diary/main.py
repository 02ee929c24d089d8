from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import register_routers
from .core.config import settings
from .core.logging import configure_logging
from .exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidCsvError,
    MoneyDiaryError,
    NotFoundError,
)

configure_logging()

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_ERROR: list[tuple[type[MoneyDiaryError], int]] = [
    (InvalidCsvError, 400),
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ConflictError, 409),
]


@app.exception_handler(MoneyDiaryError)
async def handle_domain_error(request: Request, exc: MoneyDiaryError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok"}


register_routers(app)


if __name__ == "__main__":
    # python -m money_diary.main  (or: uvicorn money_diary.main:app --reload)
    import uvicorn

    uvicorn.run("money_diary.main:app", host="127.0.0.1", port=8000, reload=settings.ENV == "dev")
