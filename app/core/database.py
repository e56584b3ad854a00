from collections.abc import Generator
from pathlib import Path
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import PROJECT_ROOT, get_settings

settings = get_settings()


def _is_memory_sqlite(raw_url: str) -> bool:
    url = make_url(raw_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _resolve_database_url(raw_url: str) -> str:
    url = make_url(raw_url)
    if url.get_backend_name() != "sqlite" or _is_memory_sqlite(raw_url):
        return raw_url

    db_path = Path(url.database)
    if not db_path.is_absolute():
        db_path = (PROJECT_ROOT / db_path).resolve()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        db_path.touch(exist_ok=True)
    except PermissionError as exc:
        raise RuntimeError(f"Ledger database is not writable: {db_path}") from exc

    if not os.access(db_path, os.W_OK):
        raise RuntimeError(f"Ledger database is not writable: {db_path}")

    return str(url.set(database=str(db_path)))


def build_engine(raw_url: str) -> Engine:
    if not raw_url.startswith("sqlite"):
        return create_engine(raw_url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": 30}
    if _is_memory_sqlite(raw_url):
        # One shared connection, otherwise every checkout sees an empty database.
        return create_engine(raw_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(_resolve_database_url(raw_url), connect_args=connect_args, pool_pre_ping=True)


class Base(DeclarativeBase):
    pass


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
