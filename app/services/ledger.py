import logging
from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import (
    InsufficientGranted,
    InsufficientVested,
    InvalidAmount,
    InvalidScheduleParameters,
    LedgerError,
    NotEligible,
    NotTransferable,
    NotVestedYet,
)
from app.models import MAX_QUANTITY, Employee, LedgerEventRecord, VestingSchedule
from app.schemas import EmployeeSnapshot, ScheduleRead, VestingSummary
from app.services.events import EventSink, Exercised, Granted, LedgerEvent, ScheduleSet, Transferred, deliver
from app.services.vesting import is_eligible, summarize_employee, vested_amount

logger = logging.getLogger(__name__)


def _is_uint(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MAX_QUANTITY


class VestingLedger:
    """Grant, schedule, exercise and transfer accounting for employee options.

    Every operation takes an explicit ``now``. The ledger does no locking of
    its own: the host must run one operation at a time against a given
    database. Mutations validate everything against the state read at the
    start of the call, then write, record the event and commit in one step.
    A rejected call raises a :class:`LedgerError` and leaves the session
    untouched.

    Admin checks for ``grant`` and ``set_schedule`` belong to the caller;
    the ledger only enforces employee eligibility.
    """

    def __init__(self, db: Session, sinks: Sequence[EventSink] = ()):
        self.db = db
        self.sinks = tuple(sinks)

    # Queries

    def vested_amount(self, employee: str, now: int) -> int:
        record = self._employee(employee)
        return vested_amount(record.schedule if record is not None else None, now)

    def snapshot(self, employee: str) -> EmployeeSnapshot:
        record = self._employee(employee)
        if record is None:
            return EmployeeSnapshot(identity=employee)

        schedule = ScheduleRead.model_validate(record.schedule) if record.schedule is not None else None
        return EmployeeSnapshot(
            identity=employee,
            granted_total=record.granted_total,
            exercised_total=record.exercised_total,
            schedule=schedule,
        )

    def summary(self, employee: str, now: int) -> VestingSummary:
        return summarize_employee(employee, self._employee(employee), now)

    def events(self, employee: str | None = None, limit: int = 50, offset: int = 0) -> list[LedgerEventRecord]:
        stmt = select(LedgerEventRecord).order_by(LedgerEventRecord.id.asc()).limit(limit).offset(offset)
        if employee is not None:
            stmt = stmt.where(
                or_(LedgerEventRecord.employee == employee, LedgerEventRecord.counterparty == employee)
            )
        return list(self.db.scalars(stmt).all())

    # Operations

    def grant(self, employee: str, amount: int, now: int) -> None:
        self._check_amount("grant", employee, amount)

        record = self._employee(employee)
        current = record.granted_total if record is not None else 0
        if current + amount > MAX_QUANTITY:
            raise self._reject("grant", employee, InvalidAmount("Grant would exceed the representable option total"))

        event = Granted(employee=employee, amount=amount, occurred_at=now)
        record = record or self._create_employee(employee)
        record.granted_total = current + amount
        self._commit(event)

    def set_schedule(
        self,
        employee: str,
        total_options: int,
        vesting_duration: int,
        cliff_duration: int,
        transferable: bool,
        now: int,
    ) -> None:
        problem = self._schedule_problem(total_options, vesting_duration, cliff_duration, now)
        if problem is not None:
            raise self._reject("set_schedule", employee, InvalidScheduleParameters(problem))

        event = ScheduleSet(
            employee=employee,
            total_options=total_options,
            vesting_duration=vesting_duration,
            cliff_duration=cliff_duration,
            transferable=bool(transferable),
            occurred_at=now,
        )
        record = self._employee(employee) or self._create_employee(employee)
        schedule = record.schedule
        if schedule is None:
            schedule = VestingSchedule()
            record.schedule = schedule

        # Replaced wholesale: prior progress is not carried over.
        schedule.total_options = total_options
        schedule.vesting_duration = vesting_duration
        schedule.cliff_duration = cliff_duration
        schedule.start_time = now
        schedule.end_time = now + vesting_duration
        schedule.transferable = bool(transferable)

        self._commit(event)

    def exercise(self, employee: str, amount: int, now: int) -> None:
        record = self._eligible_employee("exercise", employee)
        self._check_amount("exercise", employee, amount)

        schedule = record.schedule
        if now < schedule.start_time:
            raise self._reject("exercise", employee, NotVestedYet("Vesting schedule has not started"))

        available = vested_amount(schedule, now) - record.exercised_total
        if amount > available:
            raise self._reject(
                "exercise",
                employee,
                InsufficientVested(f"Requested {amount} options but only {max(available, 0)} are vested and unexercised"),
            )

        event = Exercised(employee=employee, amount=amount, occurred_at=now)
        record.exercised_total += amount
        self._commit(event)

    def transfer(self, sender: str, recipient: str, amount: int, now: int) -> None:
        record = self._eligible_employee("transfer", sender)
        if not record.schedule.transferable:
            raise self._reject("transfer", sender, NotTransferable("Vesting schedule does not allow transfers"))
        self._check_amount("transfer", sender, amount)

        available = record.granted_total - record.exercised_total
        if amount > available:
            raise self._reject(
                "transfer",
                sender,
                InsufficientGranted(f"Requested {amount} options but only {max(available, 0)} are granted and unexercised"),
            )

        target = record if recipient == sender else self._employee(recipient)
        if target is not None and target is not record and target.granted_total + amount > MAX_QUANTITY:
            raise self._reject("transfer", sender, InvalidAmount("Transfer would exceed the recipient's representable total"))

        event = Transferred(employee=sender, to=recipient, amount=amount, occurred_at=now)
        target = target or self._create_employee(recipient)
        record.granted_total -= amount
        target.granted_total += amount
        self._commit(event)

    # Helpers

    def _employee(self, identity: str) -> Employee | None:
        return self.db.scalar(
            select(Employee).options(selectinload(Employee.schedule)).where(Employee.identity == identity).limit(1)
        )

    def _create_employee(self, identity: str) -> Employee:
        record = Employee(identity=identity, granted_total=0, exercised_total=0)
        self.db.add(record)
        return record

    def _eligible_employee(self, operation: str, identity: str) -> Employee:
        record = self._employee(identity)
        if record is None or not is_eligible(record.schedule):
            raise self._reject(operation, identity, NotEligible("Caller has no active vesting schedule"))
        return record

    def _check_amount(self, operation: str, identity: str, amount: int) -> None:
        if not _is_uint(amount) or amount == 0:
            raise self._reject(operation, identity, InvalidAmount("Amount must be a positive whole number of options"))

    @staticmethod
    def _schedule_problem(total_options: int, vesting_duration: int, cliff_duration: int, now: int) -> str | None:
        if not all(_is_uint(value) for value in (total_options, vesting_duration, cliff_duration, now)):
            return "Schedule values must be non-negative whole numbers within range"
        if total_options == 0:
            return "total_options must be greater than zero"
        if vesting_duration == 0:
            return "vesting_duration must be greater than zero"
        if cliff_duration >= vesting_duration:
            return "cliff_duration must be shorter than vesting_duration"
        if now + vesting_duration > MAX_QUANTITY:
            return "Schedule end time is out of range"
        return None

    def _reject(self, operation: str, identity: str, error: LedgerError) -> LedgerError:
        logger.info("Rejected %s for %s: %s (%s)", operation, identity, error.detail, error.code)
        return error

    def _commit(self, event: LedgerEvent) -> None:
        self.db.add(event.to_record())
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to commit %s for %s", event.kind.value, event.employee)
            raise
        logger.debug("Committed %s for %s at %s", event.kind.value, event.employee, event.occurred_at)
        deliver(event, self.sinks)
