import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import select

from roomrent.database.core import AsyncSessionLocal
from roomrent.database.models import Contract, ContractStatus, Room, Usage
from roomrent.services.invoice_service import insert_invoice, get_invoice_for_period


async def find_usage_for_period(session, room_id: int, month: int, year: int) -> Optional[Usage]:
    stmt = select(Usage).where(
        Usage.room_id == room_id,
        Usage.month == month,
        Usage.year == year
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def bill_contract(session, contract, month: int, year: int) -> bool:
    """
    Make sure the contract has an invoice for the period.
    Returns True when a new invoice was written.
    """
    if await get_invoice_for_period(session, contract.id, month, year):
        return False

    room = await session.get(Room, contract.room_id)
    usage = await find_usage_for_period(session, contract.room_id, month, year)

    # No reading this period: bill the rent alone
    _, created = await insert_invoice(
        session,
        contract_id=contract.id,
        tenant_id=contract.tenant_id,
        room_id=contract.room_id,
        usage_id=usage.id if usage else None,
        month=month,
        year=year,
        room_price=contract.monthly_rent,
        electric_usage=usage.electric_usage if usage else 0,
        electric_price=room.electric_price if room else 0,
        water_usage=usage.water_usage if usage else 0,
        water_price=room.water_price if room else 0,
    )
    return created


async def run_invoice_sweep(session, month: int, year: int) -> int:
    """
    Back-fill the period's invoice for every active contract.
    Safe to run repeatedly. Returns the number of invoices created.
    """
    # Plain rows: a rollback below must not expire what is left to process
    stmt = (
        select(Contract.id, Contract.tenant_id, Contract.room_id, Contract.monthly_rent)
        .where(Contract.status == ContractStatus.active.value)
        .order_by(Contract.id)
    )
    result = await session.execute(stmt)
    contracts = result.all()

    created = 0
    for contract in contracts:
        try:
            if await bill_contract(session, contract, month, year):
                created += 1
        except Exception as e:
            logging.error(f"Error generating invoice for contract {contract.id}: {e}")
            await session.rollback()
    return created


async def monthly_invoice_job(session_factory=AsyncSessionLocal, today: Optional[date] = None) -> int:
    """Sweep for the month containing `today` (the current month by default)."""
    today = today or date.today()
    logging.info(f"Running monthly invoice job for {today.month}/{today.year}...")

    async with session_factory() as session:
        created = await run_invoice_sweep(session, today.month, today.year)

    logging.info(f"Monthly invoice job finished: {created} invoices created.")
    return created


def next_run_after(now: datetime) -> datetime:
    """00:00 on the 1st of the month following `now`."""
    first_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return (first_of_month + timedelta(days=32)).replace(day=1)


async def scheduler_loop():
    """Run the invoice sweep at midnight on the first day of each month."""
    logging.info("Scheduler started.")

    while True:
        try:
            now = datetime.now()
            next_run = next_run_after(now)
            wait_seconds = (next_run - now).total_seconds()

            logging.info(f"Next invoice sweep at {next_run} (in {wait_seconds/3600:.1f}h)")

            await asyncio.sleep(wait_seconds)

            await monthly_invoice_job()

            # Buffer to skip current minute
            await asyncio.sleep(60)

        except asyncio.CancelledError:
            logging.info("Scheduler stopped.")
            raise
        except Exception as e:
            logging.error(f"Error in scheduler loop: {e}")
            await asyncio.sleep(60)  # Prevent tight loop on error
