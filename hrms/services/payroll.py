"""
Payroll derivation.

``calculate_payroll`` is pure arithmetic; the async helpers gather the leave
days for an employee-month and upsert one ``Payroll`` row per
(employee, month, year), overwriting every derived field.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.models.employee import Attendance, Employee
from hrms.models.leave import Leave
from hrms.models.payroll import Payroll

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def round_money(value: float | int | Decimal) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayrollPolicy:
    tds_rate: float = 0.10
    leave_allowance_days: int = 2
    days_per_month: int = 30

    @classmethod
    def from_settings(cls) -> "PayrollPolicy":
        return cls(
            tds_rate=settings.TDS_RATE,
            leave_allowance_days=settings.LEAVE_ALLOWANCE_DAYS,
            days_per_month=settings.PAYROLL_DAYS_PER_MONTH,
        )


@dataclass(frozen=True)
class PayrollFigures:
    basic_salary: float
    allowances: float
    gross_salary: float
    tds: float
    leave_days: int
    leave_deduction: float
    other_deductions: float
    deductions: float
    net_salary: float


def calculate_leave_deduction(
    basic_salary: float, leave_days: int, policy: PayrollPolicy | None = None
) -> Decimal:
    """Per-day salary for every leave day beyond the monthly allowance."""
    policy = policy or PayrollPolicy.from_settings()
    excess = leave_days - policy.leave_allowance_days
    if excess <= 0 or basic_salary <= 0:
        return Decimal("0.00")
    per_day = Decimal(str(basic_salary)) / Decimal(policy.days_per_month)
    return round_money(per_day * excess)


def calculate_payroll(
    basic_salary: float,
    allowances: float = 0,
    other_deductions: float = 0,
    leave_days: int = 0,
    policy: PayrollPolicy | None = None,
) -> PayrollFigures:
    """Derive TDS, leave deduction and net salary from the pay components.

    ``net = gross - (tds + leave_deduction + other_deductions)`` where
    ``gross = basic + allowances`` and ``tds = rate * gross``.
    """
    policy = policy or PayrollPolicy.from_settings()
    basic = round_money(basic_salary)
    allow = round_money(allowances)
    other = round_money(other_deductions)
    gross = basic + allow
    tds = round_money(gross * Decimal(str(policy.tds_rate)))
    leave_deduction = calculate_leave_deduction(float(basic), leave_days, policy)
    deductions = tds + leave_deduction + other
    net = gross - deductions
    return PayrollFigures(
        basic_salary=float(basic),
        allowances=float(allow),
        gross_salary=float(gross),
        tds=float(tds),
        leave_days=leave_days,
        leave_deduction=float(leave_deduction),
        other_deductions=float(other),
        deductions=float(deductions),
        net_salary=float(net),
    )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def months_between(start: date, end: date) -> list[tuple[int, int]]:
    """Every (year, month) touched by the inclusive range *start*..*end*."""
    months: list[tuple[int, int]] = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return months


# ── Database helpers ────────────────────────────────────────────────
async def count_leave_days(
    db: AsyncSession, employee_id: int, month: int, year: int
) -> int:
    """Leave days in the month: the larger of marked ``on_leave`` days and
    days covered by non-rejected leave requests."""
    start, end = month_bounds(year, month)

    attendance_days = (
        await db.execute(
            select(func.count(Attendance.id)).where(
                Attendance.employee_id == employee_id,
                Attendance.status == "on_leave",
                Attendance.date.between(start, end),
            )
        )
    ).scalar_one()

    leaves = (
        await db.execute(
            select(Leave.start_date, Leave.end_date).where(
                Leave.employee_id == employee_id,
                Leave.status != "rejected",
                and_(Leave.start_date <= end, Leave.end_date >= start),
            )
        )
    ).all()
    covered: set[date] = set()
    for leave_start, leave_end in leaves:
        day = max(leave_start, start)
        last = min(leave_end, end)
        while day <= last:
            covered.add(day)
            day += timedelta(days=1)

    return max(int(attendance_days or 0), len(covered))


def resolve_basic_salary(
    employee: Employee, requested: float | None, stored: Payroll | None
) -> float:
    """Pick the basic salary for a computation.

    An explicit request wins; otherwise the employee's current salary is
    authoritative whenever it is positive; otherwise the stored payroll value.
    """
    if requested is not None:
        return requested
    salary = float(employee.salary or 0)
    if salary > 0:
        if stored is not None and abs(float(stored.basic_salary or 0) - salary) >= 0.01:
            logger.warning(
                "Payroll %s basic salary %.2f replaced by employee %s salary %.2f",
                stored.id,
                stored.basic_salary,
                employee.id,
                salary,
            )
        return salary
    if stored is not None:
        return float(stored.basic_salary or 0)
    return 0.0


def apply_figures(payroll: Payroll, figures: PayrollFigures) -> None:
    payroll.basic_salary = figures.basic_salary
    payroll.allowances = figures.allowances
    payroll.other_deductions = figures.other_deductions
    payroll.leave_deduction = figures.leave_deduction
    payroll.tds = figures.tds
    payroll.deductions = figures.deductions
    payroll.net_salary = figures.net_salary


async def get_payroll(
    db: AsyncSession, employee_id: int, month: int, year: int
) -> Payroll | None:
    result = await db.execute(
        select(Payroll).where(
            Payroll.employee_id == employee_id,
            Payroll.month == month,
            Payroll.year == year,
        )
    )
    return result.scalar_one_or_none()


async def upsert_payroll(
    db: AsyncSession,
    employee: Employee,
    month: int,
    year: int,
    *,
    basic_salary: float | None = None,
    allowances: float | None = None,
    other_deductions: float | None = None,
    status: str | None = None,
    processed_by: int | None = None,
) -> tuple[Payroll, PayrollFigures, bool]:
    """Insert or overwrite the payroll row for (employee, month, year).

    Returns ``(row, figures, created)``.  The caller commits.
    """
    existing = await get_payroll(db, employee.id, month, year)
    basic = resolve_basic_salary(employee, basic_salary, existing)
    if allowances is None:
        allowances = float(existing.allowances or 0) if existing else 0.0
    if other_deductions is None:
        other_deductions = float(existing.other_deductions or 0) if existing else 0.0

    leave_days = await count_leave_days(db, employee.id, month, year)
    figures = calculate_payroll(basic, allowances, other_deductions, leave_days)

    created = existing is None
    payroll = existing or Payroll(employee_id=employee.id, month=month, year=year)
    apply_figures(payroll, figures)
    if status is not None:
        if status in ("processed", "paid") and payroll.status != status:
            payroll.processed_at = datetime.now(timezone.utc)
            payroll.processed_by = processed_by
        elif status not in ("processed", "paid"):
            payroll.processed_at = None
            payroll.processed_by = None
        payroll.status = status
    elif created:
        payroll.status = "pending"
    if created:
        db.add(payroll)
    await db.flush()
    return payroll, figures, created


async def recalculate_for_months(
    db: AsyncSession, employee_id: int, months: list[tuple[int, int]]
) -> int:
    """Recompute existing payroll rows of *employee_id* for the given
    ``(year, month)`` pairs after leave changes.  Returns rows updated."""
    employee = await db.get(Employee, employee_id)
    if employee is None:
        return 0
    updated = 0
    for year, month in months:
        if await get_payroll(db, employee_id, month, year) is None:
            continue
        await upsert_payroll(db, employee, month, year)
        updated += 1
        logger.info(
            "Recalculated payroll for employee %s (%02d/%d)", employee_id, month, year
        )
    return updated
