from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_caller, get_ledger, get_now, ledger_lock
from app.schemas import EmployeeSnapshot, ExerciseCreate, LedgerEventRead, TransferCreate
from app.services.ledger import VestingLedger

router = APIRouter(prefix="/api", tags=["options"])


@router.post("/exercises", response_model=EmployeeSnapshot, status_code=status.HTTP_201_CREATED)
def exercise_options(
    payload: ExerciseCreate,
    ledger: VestingLedger = Depends(get_ledger),
    now: int = Depends(get_now),
    caller: str = Depends(get_caller),
) -> EmployeeSnapshot:
    with ledger_lock:
        ledger.exercise(caller, payload.amount, now)
        return ledger.snapshot(caller)


@router.post("/transfers", response_model=EmployeeSnapshot, status_code=status.HTTP_201_CREATED)
def transfer_options(
    payload: TransferCreate,
    ledger: VestingLedger = Depends(get_ledger),
    now: int = Depends(get_now),
    caller: str = Depends(get_caller),
) -> EmployeeSnapshot:
    with ledger_lock:
        ledger.transfer(caller, payload.to, payload.amount, now)
        return ledger.snapshot(caller)


@router.get("/events", response_model=list[LedgerEventRead])
def list_events(
    employee: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    ledger: VestingLedger = Depends(get_ledger),
    _: str = Depends(get_caller),
) -> list[LedgerEventRead]:
    with ledger_lock:
        rows = ledger.events(employee, limit=limit, offset=offset)
        return [LedgerEventRead.model_validate(row) for row in rows]
