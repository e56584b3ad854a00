from app.models import Employee, VestingSchedule
from app.schemas import VestingSummary


def vested_amount(schedule: VestingSchedule | None, now: int) -> int:
    """Options vested under ``schedule`` at time ``now``.

    Zero before the cliff, everything from ``end_time`` on, and a linear ramp
    measured from ``start_time`` in between. The ramp truncates, so the result
    can trail the exact fraction by less than one option.
    """
    if schedule is None:
        return 0

    if now < schedule.start_time + schedule.cliff_duration:
        return 0

    if now >= schedule.end_time:
        return schedule.total_options

    elapsed = now - schedule.start_time
    return (schedule.total_options * elapsed) // schedule.vesting_duration


def is_eligible(schedule: VestingSchedule | None) -> bool:
    return schedule is not None and schedule.total_options > 0


def summarize_employee(identity: str, employee: Employee | None, now: int) -> VestingSummary:
    schedule = employee.schedule if employee is not None else None
    granted = employee.granted_total if employee is not None else 0
    exercised = employee.exercised_total if employee is not None else 0

    vested = vested_amount(schedule, now)
    total_options = schedule.total_options if schedule is not None else 0

    return VestingSummary(
        identity=identity,
        as_of=now,
        eligible=is_eligible(schedule),
        transferable=bool(schedule is not None and schedule.transferable),
        granted_total=granted,
        exercised_total=exercised,
        total_options=total_options,
        vested_options=vested,
        unvested_options=max(total_options - vested, 0),
        available_to_exercise=max(vested - exercised, 0),
        available_to_transfer=max(granted - exercised, 0),
    )
