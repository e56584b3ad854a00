from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes.employees import router as employees_router
from app.api.routes.options import router as options_router
from app.core.config import get_settings
from app.core.database import init_db
from app.core.errors import LedgerError, ledger_error_handler
from app.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.debug)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.environment.lower() == "production" and not settings.admin_identity_list:
        raise RuntimeError("ADMIN_IDENTITIES must be set in production")
    init_db()
    yield


app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(LedgerError, ledger_error_handler)

app.include_router(employees_router)
app.include_router(options_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
