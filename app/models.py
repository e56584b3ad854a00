from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Enum as SQLEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

# Largest value a BigInteger column holds; quantities and timestamps above it are rejected.
MAX_QUANTITY = 2**63 - 1


class EventKind(str, Enum):
    GRANTED = "granted"
    SCHEDULE_SET = "schedule_set"
    EXERCISED = "exercised"
    TRANSFERRED = "transferred"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    identity: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    granted_total: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    exercised_total: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    schedule: Mapped["VestingSchedule | None"] = relationship(
        back_populates="employee", uselist=False, cascade="all, delete-orphan"
    )


class VestingSchedule(Base):
    __tablename__ = "vesting_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"), unique=True, nullable=False, index=True)
    total_options: Mapped[int] = mapped_column(BigInteger, nullable=False)
    vesting_duration: Mapped[int] = mapped_column(BigInteger, nullable=False)
    cliff_duration: Mapped[int] = mapped_column(BigInteger, nullable=False)
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transferable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    employee: Mapped[Employee] = relationship(back_populates="schedule")


class LedgerEventRecord(Base):
    __tablename__ = "ledger_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    kind: Mapped[EventKind] = mapped_column(SQLEnum(EventKind), nullable=False, index=True)
    employee: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    counterparty: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    amount: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    occurred_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
