import logging
from collections.abc import Callable, Iterable
from typing import Literal

from pydantic import BaseModel, ConfigDict

from app.models import EventKind, LedgerEventRecord

logger = logging.getLogger(__name__)


class LedgerEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: EventKind
    employee: str
    occurred_at: int

    def to_record(self) -> LedgerEventRecord:
        payload = self.model_dump(mode="json", exclude={"kind", "employee", "occurred_at"})
        return LedgerEventRecord(
            kind=self.kind,
            employee=self.employee,
            counterparty=payload.get("to"),
            amount=payload.get("amount"),
            payload=payload,
            occurred_at=self.occurred_at,
        )


class Granted(LedgerEvent):
    kind: Literal[EventKind.GRANTED] = EventKind.GRANTED
    amount: int


class ScheduleSet(LedgerEvent):
    kind: Literal[EventKind.SCHEDULE_SET] = EventKind.SCHEDULE_SET
    total_options: int
    vesting_duration: int
    cliff_duration: int
    transferable: bool


class Exercised(LedgerEvent):
    kind: Literal[EventKind.EXERCISED] = EventKind.EXERCISED
    amount: int


class Transferred(LedgerEvent):
    kind: Literal[EventKind.TRANSFERRED] = EventKind.TRANSFERRED
    to: str
    amount: int


EventSink = Callable[[LedgerEvent], None]


def log_event(event: LedgerEvent) -> None:
    details = event.model_dump(mode="json", exclude={"kind", "employee"})
    logger.info("ledger event %s for %s: %s", event.kind.value, event.employee, details)


def deliver(event: LedgerEvent, sinks: Iterable[EventSink]) -> None:
    """Hand ``event`` to every sink. Sinks get no retry and cannot fail the operation."""
    for sink in sinks:
        try:
            sink(event)
        except Exception:
            logger.exception("Event sink %r failed for %s event", sink, event.kind.value)
