"""
Invoice generation and invoice status management.

At most one invoice exists per (contract, month, year). The guarantee lives
in the `uq_invoice_contract_period` constraint; `insert_invoice` inserts with
ON CONFLICT DO NOTHING and hands back the row that won, so concurrent
triggers (reading ingest racing the monthly sweep) never duplicate or fail.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, List, NamedTuple, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from roomrent.config import config
from roomrent.database.core import upsert_insert
from roomrent.database.models import (
    Invoice, InvoiceStatus, Contract, ContractStatus, Room, Usage
)
from roomrent.errors import NotFoundError, ValidationError
from roomrent.services.notification_service import TextNotifier, notify_safely
from roomrent.utils.formatting import to_decimal, format_amount, format_date


class InvoiceCharges(NamedTuple):
    """Computed money fields of one invoice"""
    room_price: Decimal
    electric_total: Decimal
    water_total: Decimal
    total_amount: Decimal


class TenantBalance(NamedTuple):
    tenant_id: int
    total_owed: Decimal
    pending_amount: Decimal
    overdue_amount: Decimal
    paid_amount: Decimal
    pending_count: int
    overdue_count: int
    paid_count: int


def compute_due_date(month: int, year: int, due_day: Optional[int] = None) -> date:
    """Due date falls on `due_day` of the month after the billed period."""
    if due_day is None:
        due_day = config.INVOICE_DUE_DAY
    if month == 12:
        return date(year + 1, 1, due_day)
    return date(year, month + 1, due_day)


def calculate_charges(room_price, electric_usage, electric_price, water_usage, water_price) -> InvoiceCharges:
    room_price = to_decimal(room_price)
    electric_total = to_decimal(electric_usage) * to_decimal(electric_price)
    water_total = to_decimal(water_usage) * to_decimal(water_price)
    return InvoiceCharges(
        room_price=room_price,
        electric_total=electric_total,
        water_total=water_total,
        total_amount=room_price + electric_total + water_total,
    )


# --- Lookups ---

async def find_active_contract(session: AsyncSession, room_id: int) -> Optional[Contract]:
    stmt = (
        select(Contract)
        .where(Contract.room_id == room_id, Contract.status == ContractStatus.active.value)
        .order_by(Contract.id)
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_invoice_for_period(
    session: AsyncSession, contract_id: int, month: int, year: int
) -> Optional[Invoice]:
    stmt = select(Invoice).where(
        Invoice.contract_id == contract_id,
        Invoice.month == month,
        Invoice.year == year
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


# --- Creation ---

async def insert_invoice(
    session: AsyncSession,
    *,
    contract_id: int,
    tenant_id: int,
    room_id: int,
    month: int,
    year: int,
    room_price,
    electric_usage,
    electric_price,
    water_usage,
    water_price,
    usage_id: Optional[int] = None,
) -> Tuple[Optional[Invoice], bool]:
    """
    Insert an invoice for the period, absorbing duplicates.

    Returns (invoice, created). When (contract_id, month, year) is already
    billed, the stored row comes back with created=False. When the usage
    row is already billed under another contract (room changed hands
    mid-period), the contract is billed rent only without a usage link.
    """
    charges = calculate_charges(room_price, electric_usage, electric_price, water_usage, water_price)

    stmt = upsert_insert(session, Invoice).values([{
        "contract_id": contract_id,
        "tenant_id": tenant_id,
        "room_id": room_id,
        "usage_id": usage_id,
        "month": month,
        "year": year,
        "room_price": charges.room_price,
        "electric_usage": to_decimal(electric_usage),
        "electric_price": to_decimal(electric_price),
        "electric_total": charges.electric_total,
        "water_usage": to_decimal(water_usage),
        "water_price": to_decimal(water_price),
        "water_total": charges.water_total,
        "total_amount": charges.total_amount,
        "status": InvoiceStatus.PENDING.value,
        "due_date": compute_due_date(month, year),
    }]).on_conflict_do_nothing()

    result = await session.scalars(stmt.returning(Invoice))
    invoice = result.one_or_none()
    await session.commit()

    if invoice is not None:
        logging.info(
            f"Invoice {invoice.id} created for contract {contract_id} "
            f"({month}/{year}): total {charges.total_amount}"
        )
        return invoice, True

    existing = await get_invoice_for_period(session, contract_id, month, year)
    if existing is not None or usage_id is None:
        return existing, False

    logging.warning(
        f"Usage {usage_id} is already billed under another contract, "
        f"billing contract {contract_id} ({month}/{year}) rent only"
    )
    return await insert_invoice(
        session,
        contract_id=contract_id,
        tenant_id=tenant_id,
        room_id=room_id,
        month=month,
        year=year,
        room_price=room_price,
        electric_usage=0,
        electric_price=electric_price,
        water_usage=0,
        water_price=water_price,
    )


async def create_invoice(session: AsyncSession, **fields) -> Optional[Invoice]:
    """Like `insert_invoice`, returning only the period's invoice."""
    invoice, _ = await insert_invoice(session, **fields)
    return invoice


async def generate_for_usage(session: AsyncSession, usage: Usage) -> Optional[Invoice]:
    """
    Derive the invoice for a usage row from the room's active contract.
    No active contract means nothing to bill.
    """
    contract = await find_active_contract(session, usage.room_id)
    if not contract:
        logging.info(f"No active contract for room {usage.room_id}, usage {usage.id} not billed")
        return None

    existing = await get_invoice_for_period(session, contract.id, usage.month, usage.year)
    if existing:
        return existing

    room = await session.get(Room, usage.room_id)
    if not room:
        return None

    return await create_invoice(
        session,
        contract_id=contract.id,
        tenant_id=contract.tenant_id,
        room_id=usage.room_id,
        usage_id=usage.id,
        month=usage.month,
        year=usage.year,
        room_price=contract.monthly_rent,
        electric_usage=usage.electric_usage or 0,
        electric_price=room.electric_price or 0,
        water_usage=usage.water_usage or 0,
        water_price=room.water_price or 0,
    )


async def generate_for_usage_safely(session: AsyncSession, usage: Usage) -> Optional[Invoice]:
    """Best-effort variant used by reading ingest: never raises."""
    usage_id = usage.id
    try:
        return await generate_for_usage(session, usage)
    except Exception:
        logging.exception(f"Error generating invoice for usage {usage_id}")
        await session.rollback()
        # Rollback expires loaded rows; the caller still returns this usage
        try:
            await session.refresh(usage)
        except Exception as e:
            logging.warning(f"Could not reload usage {usage_id} after rollback: {e}")
        return None


# --- Queries ---

async def list_invoices(
    session: AsyncSession,
    landlord_id: Optional[int] = None,
    tenant_id: Optional[int] = None
) -> List[Invoice]:
    stmt = select(Invoice)
    if tenant_id:
        stmt = stmt.where(Invoice.tenant_id == tenant_id)
    elif landlord_id:
        stmt = stmt.join(Contract, Invoice.contract_id == Contract.id).where(Contract.landlord_id == landlord_id)
    stmt = stmt.order_by(Invoice.year.desc(), Invoice.month.desc(), Invoice.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_invoice(session: AsyncSession, invoice_id: int, with_relations: bool = False) -> Invoice:
    stmt = select(Invoice).where(Invoice.id == invoice_id)
    if with_relations:
        stmt = stmt.options(
            selectinload(Invoice.tenant),
            selectinload(Invoice.room).selectinload(Room.landlord),
            selectinload(Invoice.contract),
            selectinload(Invoice.usage),
        )
    result = await session.execute(stmt)
    invoice = result.scalar_one_or_none()
    if not invoice:
        raise NotFoundError(f"Invoice with ID {invoice_id} not found")
    return invoice


async def get_invoice_landlord_id(session: AsyncSession, invoice: Invoice) -> Optional[int]:
    stmt = select(Contract.landlord_id).where(Contract.id == invoice.contract_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


# --- Status ---

async def update_status(
    session: AsyncSession,
    invoice_id: int,
    status: InvoiceStatus,
    paid_date: Optional[datetime] = None
) -> Invoice:
    """Set status; paid_date is kept only for PAID (now when not supplied)."""
    try:
        status = InvoiceStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown invoice status {status!r}")

    invoice = await get_invoice(session, invoice_id)
    invoice.status = status.value
    if status == InvoiceStatus.PAID:
        invoice.paid_date = paid_date or datetime.now(timezone.utc)
    else:
        invoice.paid_date = None
    await session.commit()
    return invoice


async def mark_as_paid(session: AsyncSession, invoice_id: int, paid_date: Optional[datetime] = None) -> Invoice:
    # Re-marking a paid invoice just refreshes paid_date
    return await update_status(session, invoice_id, InvoiceStatus.PAID, paid_date)


# --- Notifications ---

def build_invoice_message(invoice: Invoice) -> str:
    room_number = invoice.room.room_number if invoice.room else invoice.room_id
    return (
        f"Invoice {invoice.month}/{invoice.year} - Room {room_number}: "
        f"{format_amount(invoice.total_amount)}. Due: {format_date(invoice.due_date)}"
    )


async def send_invoice_notification(session: AsyncSession, invoice_id: int, notifier: TextNotifier) -> bool:
    """
    Text the invoice summary to the tenant at the address the provider
    uses (phone for SMS, chat id for Telegram). A tenant the provider
    cannot reach is a client error; delivery failure is only logged.
    """
    invoice = await get_invoice(session, invoice_id, with_relations=True)
    destination = notifier.resolve_destination(invoice.tenant) if invoice.tenant else None
    if not destination:
        raise NotFoundError(f"Tenant {notifier.contact_label} not found")

    return await notify_safely(notifier, destination, build_invoice_message(invoice))


# --- Reporting ---

async def get_tenant_balance(session: AsyncSession, tenant_id: int) -> TenantBalance:
    stmt = (
        select(Invoice.status, func.count(Invoice.id), func.coalesce(func.sum(Invoice.total_amount), 0))
        .where(Invoice.tenant_id == tenant_id)
        .group_by(Invoice.status)
    )
    result = await session.execute(stmt)

    amounts = {s.value: Decimal("0") for s in InvoiceStatus}
    counts = {s.value: 0 for s in InvoiceStatus}
    for status, count, total in result.all():
        amounts[status] = to_decimal(total)
        counts[status] = count

    pending = amounts[InvoiceStatus.PENDING.value]
    overdue = amounts[InvoiceStatus.OVERDUE.value]
    return TenantBalance(
        tenant_id=tenant_id,
        total_owed=pending + overdue,
        pending_amount=pending,
        overdue_amount=overdue,
        paid_amount=amounts[InvoiceStatus.PAID.value],
        pending_count=counts[InvoiceStatus.PENDING.value],
        overdue_count=counts[InvoiceStatus.OVERDUE.value],
        paid_count=counts[InvoiceStatus.PAID.value],
    )
