import logging

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_caller, get_ledger, get_now, ledger_lock, require_admin
from app.schemas import EmployeeSnapshot, GrantCreate, ScheduleCreate, VestedRead, VestingSummary
from app.services.ledger import VestingLedger

router = APIRouter(prefix="/api/employees", tags=["employees"])
logger = logging.getLogger(__name__)


@router.post("/{identity}/grants", response_model=EmployeeSnapshot, status_code=status.HTTP_201_CREATED)
def grant_options(
    identity: str,
    payload: GrantCreate,
    ledger: VestingLedger = Depends(get_ledger),
    now: int = Depends(get_now),
    current_admin: str = Depends(require_admin),
) -> EmployeeSnapshot:
    logger.info("%s granting %s options to %s", current_admin, payload.amount, identity)
    with ledger_lock:
        ledger.grant(identity, payload.amount, now)
        return ledger.snapshot(identity)


@router.put("/{identity}/schedule", response_model=EmployeeSnapshot)
def set_schedule(
    identity: str,
    payload: ScheduleCreate,
    ledger: VestingLedger = Depends(get_ledger),
    now: int = Depends(get_now),
    current_admin: str = Depends(require_admin),
) -> EmployeeSnapshot:
    logger.info("%s setting vesting schedule for %s", current_admin, identity)
    with ledger_lock:
        ledger.set_schedule(
            identity,
            total_options=payload.total_options,
            vesting_duration=payload.vesting_duration,
            cliff_duration=payload.cliff_duration,
            transferable=payload.transferable,
            now=now,
        )
        return ledger.snapshot(identity)


@router.get("/{identity}", response_model=EmployeeSnapshot)
def get_employee(
    identity: str,
    ledger: VestingLedger = Depends(get_ledger),
    _: str = Depends(get_caller),
) -> EmployeeSnapshot:
    with ledger_lock:
        return ledger.snapshot(identity)


@router.get("/{identity}/vested", response_model=VestedRead)
def get_vested(
    identity: str,
    at: int | None = Query(default=None, ge=0),
    ledger: VestingLedger = Depends(get_ledger),
    now: int = Depends(get_now),
    _: str = Depends(get_caller),
) -> VestedRead:
    as_of = now if at is None else at
    with ledger_lock:
        vested = ledger.vested_amount(identity, as_of)
    return VestedRead(identity=identity, as_of=as_of, vested_options=vested)


@router.get("/{identity}/summary", response_model=VestingSummary)
def get_summary(
    identity: str,
    at: int | None = Query(default=None, ge=0),
    ledger: VestingLedger = Depends(get_ledger),
    now: int = Depends(get_now),
    _: str = Depends(get_caller),
) -> VestingSummary:
    with ledger_lock:
        return ledger.summary(identity, now if at is None else at)
