"""
Accounting ledger: monthly heads with TDS / GST rates.

One-off (``Once``) entries always insert; recurring heads are unique per
(head, subhead, month, year) and are updated in place.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.v1.deps import get_db, require_accounts
from hrms.models.accounting import AccountingEntry
from hrms.models.payroll import Payroll
from hrms.schemas.accounting import (AccountingAmountUpdate,
                                     AccountingEntryCreate, AccountingEntryRead,
                                     AccountingPeriod)
from hrms.schemas.common import DeleteResponse
from hrms.schemas.user import CurrentUser

router = APIRouter(prefix="/accounting", tags=["accounting"])
logger = logging.getLogger(__name__)

SALARY_HEAD = "Salary & Wages"

# (head, tds %, gst %, remarks)
DEFAULT_HEADS: list[tuple[str, float, float, str]] = [
    (SALARY_HEAD, 10, 0, "Employee salaries and wages"),
    ("Rent", 10, 18, "Office rent"),
    ("Utilities", 10, 18, "Electricity, water, internet"),
    ("Office Expenses", 10, 18, "Office supplies and maintenance"),
    ("Professional Services", 10, 18, "Legal, consulting, audit services"),
    ("Contractor Payments", 10, 18, "Freelancer and contractor payments"),
    ("Interest Paid", 10, 0, "Bank interest and loan interest"),
    ("Travel & Conveyance", 10, 5, "Employee travel and transportation"),
    ("Marketing & Advertising", 10, 18, "Marketing campaigns and advertising"),
    ("Insurance", 10, 18, "Business insurance premiums"),
    ("Miscellaneous Expenses", 10, 18, "Other operating expenses"),
    ("TDS Payable", 0, 0, "Tax Deducted at Source payable"),
    ("GST Payable", 0, 0, "Goods and Services Tax payable"),
]


async def _find_recurring(
    db: AsyncSession, head: str, subhead: str | None, month: int, year: int
) -> AccountingEntry | None:
    result = await db.execute(
        select(AccountingEntry).where(
            AccountingEntry.head == head,
            func.coalesce(AccountingEntry.subhead, "") == (subhead or ""),
            AccountingEntry.month == month,
            AccountingEntry.year == year,
            AccountingEntry.frequency != "Once",
        )
    )
    return result.scalars().first()


@router.get("", response_model=list[AccountingEntryRead])
async def list_entries(
    month: int = Query(ge=1, le=12),
    year: int = Query(ge=2000, le=2100),
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_accounts),
) -> list[AccountingEntry]:
    """Ledger entries for one month."""
    result = await db.execute(
        select(AccountingEntry)
        .where(AccountingEntry.month == month, AccountingEntry.year == year)
        .order_by(AccountingEntry.head, AccountingEntry.subhead, AccountingEntry.id)
    )
    return list(result.scalars().all())


@router.post("", response_model=AccountingEntryRead, status_code=201)
async def create_entry(
    body: AccountingEntryCreate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_accounts),
) -> AccountingEntry:
    """Add an entry; a recurring head already present for the month is updated."""
    data = body.model_dump()
    entry = None
    if body.frequency != "Once":
        entry = await _find_recurring(db, body.head, body.subhead, body.month, body.year)
    if entry is None:
        entry = AccountingEntry(**data)
        db.add(entry)
    else:
        for field, value in data.items():
            setattr(entry, field, value)
    await db.commit()
    await db.refresh(entry)
    return entry


@router.post("/initialize", response_model=list[AccountingEntryRead], status_code=201)
async def initialize_entries(
    body: AccountingPeriod,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_accounts),
) -> list[AccountingEntry]:
    """Seed the default heads for a month that has no entries yet."""
    existing = await db.execute(
        select(func.count(AccountingEntry.id)).where(
            AccountingEntry.month == body.month, AccountingEntry.year == body.year
        )
    )
    if existing.scalar_one() > 0:
        raise HTTPException(
            status_code=400, detail="Accounting entries already exist for this period"
        )

    entries = [
        AccountingEntry(
            head=head,
            tds_percentage=tds,
            gst_percentage=gst,
            frequency="Monthly",
            remarks=remarks,
            amount=0,
            month=body.month,
            year=body.year,
        )
        for head, tds, gst, remarks in DEFAULT_HEADS
    ]
    db.add_all(entries)
    await db.commit()
    for entry in entries:
        await db.refresh(entry)
    logger.info("Initialised %d accounting heads for %02d/%d", len(entries), body.month, body.year)
    return entries


@router.post("/sync-salary", response_model=AccountingEntryRead)
async def sync_salary(
    body: AccountingPeriod,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_accounts),
) -> AccountingEntry:
    """Set the month's "Salary & Wages" amount to the gross of paid payroll."""
    result = await db.execute(
        select(func.coalesce(func.sum(Payroll.basic_salary + Payroll.allowances), 0)).where(
            Payroll.month == body.month,
            Payroll.year == body.year,
            Payroll.status == "paid",
        )
    )
    total = round(float(result.scalar_one() or 0), 2)

    entry = await _find_recurring(db, SALARY_HEAD, None, body.month, body.year)
    if entry is None:
        entry = AccountingEntry(
            head=SALARY_HEAD,
            tds_percentage=10,
            gst_percentage=0,
            frequency="Monthly",
            month=body.month,
            year=body.year,
        )
        db.add(entry)
    entry.amount = total
    await db.commit()
    await db.refresh(entry)
    logger.info("Synced salary total %.2f for %02d/%d", total, body.month, body.year)
    return entry


@router.put("/{entry_id}", response_model=AccountingEntryRead)
async def update_entry_amount(
    entry_id: int,
    body: AccountingAmountUpdate,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_accounts),
) -> AccountingEntry:
    """Change the amount (and optionally remarks) of an entry."""
    entry = await db.get(AccountingEntry, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Accounting entry not found")
    entry.amount = body.amount
    if body.remarks is not None:
        entry.remarks = body.remarks
    await db.commit()
    await db.refresh(entry)
    return entry


@router.delete("/{entry_id}", response_model=DeleteResponse)
async def delete_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    _user: CurrentUser = Depends(require_accounts),
) -> DeleteResponse:
    entry = await db.get(AccountingEntry, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Accounting entry not found")
    await db.delete(entry)
    await db.commit()
    return DeleteResponse(message="Accounting entry deleted", id=entry_id)
