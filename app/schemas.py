from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models import EventKind


class GrantCreate(BaseModel):
    amount: int = Field(ge=0)


class ScheduleCreate(BaseModel):
    total_options: int = Field(ge=0)
    vesting_duration: int = Field(ge=0)
    cliff_duration: int = Field(ge=0)
    transferable: bool = False


class ExerciseCreate(BaseModel):
    amount: int = Field(ge=0)


class TransferCreate(BaseModel):
    to: str = Field(min_length=1, max_length=255)
    amount: int = Field(ge=0)


class ScheduleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    total_options: int
    vesting_duration: int
    cliff_duration: int
    start_time: int
    end_time: int
    transferable: bool


class EmployeeSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity: str
    granted_total: int = 0
    exercised_total: int = 0
    schedule: ScheduleRead | None = None


class VestedRead(BaseModel):
    identity: str
    as_of: int
    vested_options: int


class VestingSummary(BaseModel):
    identity: str
    as_of: int
    eligible: bool
    transferable: bool
    granted_total: int
    exercised_total: int
    total_options: int
    vested_options: int
    unvested_options: int
    available_to_exercise: int
    available_to_transfer: int


class LedgerEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: EventKind
    employee: str
    counterparty: str | None
    amount: int | None
    payload: dict[str, Any]
    occurred_at: int
    created_at: datetime
