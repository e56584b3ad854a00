import threading
from collections.abc import Generator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.core.clock import clock
from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import Unauthorized
from app.services.events import log_event
from app.services.ledger import VestingLedger

settings = get_settings()

# Endpoints hold this around their ledger calls only, inside the worker thread
# already running them, so a waiting request never holds up the holder.
ledger_lock = threading.Lock()


def get_db_session() -> Generator[Session, None, None]:
    yield from get_db()


def get_now() -> int:
    return clock.now()


def get_ledger(db: Session = Depends(get_db_session)) -> VestingLedger:
    return VestingLedger(db, sinks=[log_event])


def get_caller(x_caller_identity: str | None = Header(default=None)) -> str:
    identity = (x_caller_identity or "").strip()
    if not identity:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Caller identity required")
    return identity


def require_admin(caller: str = Depends(get_caller)) -> str:
    if not settings.is_admin(caller):
        raise Unauthorized("Admin access required")
    return caller
