"""
Wall-clock arithmetic for attendance and payroll figures.

All times are local ``HH:MM`` strings (``HH:MM:SS`` is accepted and the
seconds are dropped); comparisons happen on minutes since midnight.
"""

SCHEDULED_ENTRY = "09:00"
SCHEDULED_EXIT = "18:00"
TOLERANCE_MINUTES = 5
LUNCH_BREAK_MINUTES = 60

MONTHLY_SCHEDULED_HOURS = 240
DAYS_PER_MONTH = 30
WEEKDAY_OVERTIME_MULTIPLIER = 1.25
# TODO: select HOLIDAY_OVERTIME_MULTIPLIER in overtime_pay once overtime hours
# are split by holiday/weekday at ingestion; today every hour is paid at 1.25x.
HOLIDAY_OVERTIME_MULTIPLIER = 1.35

ABSENT_MARK = "-"


def is_blank_time(value: str | None) -> bool:
    """True for the biometric device's "no punch" cells: empty or ``-``."""
    return value is None or not value.strip() or value.strip() == ABSENT_MARK


def parse_time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` (or ``HH:MM:SS``) to minutes since midnight.

    Raises ValueError for anything else.
    """
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"invalid clock time '{value}'")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"clock time out of range '{value}'")
    return hours * 60 + minutes


def normalize_time(value: str) -> str:
    """Return the ``HH:MM`` form of a clock time, dropping seconds."""
    minutes = parse_time_to_minutes(value)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def tardiness(
    entry_time: str,
    scheduled_entry: str = SCHEDULED_ENTRY,
    tolerance_minutes: int = TOLERANCE_MINUTES,
) -> int:
    """Minutes late, counted from the scheduled entry.

    The tolerance only decides whether a penalty applies. Once breached the
    full delay is returned: 09:07 against 09:00 with 5 minutes of tolerance
    is 7, not 2.
    """
    entry = parse_time_to_minutes(entry_time)
    scheduled = parse_time_to_minutes(scheduled_entry)
    if entry <= scheduled + tolerance_minutes:
        return 0
    return entry - scheduled


def early_leave(exit_time: str, scheduled_exit: str = SCHEDULED_EXIT) -> int:
    return max(0, parse_time_to_minutes(scheduled_exit) - parse_time_to_minutes(exit_time))


def overtime_minutes(exit_time: str, scheduled_exit: str = SCHEDULED_EXIT) -> int:
    return max(0, parse_time_to_minutes(exit_time) - parse_time_to_minutes(scheduled_exit))


def worked_hours(
    entry_time: str,
    exit_time: str,
    lunch_break_minutes: int = LUNCH_BREAK_MINUTES,
) -> float:
    """Hours between entry and exit minus a fixed lunch break, floored at 0.

    The break is subtracted whether or not one was taken.
    """
    span = parse_time_to_minutes(exit_time) - parse_time_to_minutes(entry_time)
    return max(0.0, (span - lunch_break_minutes) / 60)


def tardy_deduction(tardy_minutes: float, monthly_salary: float) -> float:
    minute_rate = monthly_salary / MONTHLY_SCHEDULED_HOURS / 60
    return tardy_minutes * minute_rate


def absence_deduction(absence_days: float, monthly_salary: float) -> float:
    return absence_days * (monthly_salary / DAYS_PER_MONTH)


def overtime_pay(overtime_hours: float, monthly_salary: float) -> float:
    hourly_rate = monthly_salary / MONTHLY_SCHEDULED_HOURS
    return overtime_hours * hourly_rate * WEEKDAY_OVERTIME_MULTIPLIER
