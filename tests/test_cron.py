import pytest
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, func

from roomrent import cron
from roomrent.cron import run_invoice_sweep, monthly_invoice_job, next_run_after
from roomrent.database.models import Invoice
from roomrent.services.contract_service import create_contract, terminate_contract
from roomrent.services.invoice_service import create_invoice, get_invoice_for_period
from roomrent.services.room_service import create_room
from roomrent.services.tenant_service import create_tenant
from roomrent.services.usage_service import submit_manual_reading, submit_auto_reading


async def invoices_for(session, month, year):
    result = await session.execute(
        select(Invoice).where(Invoice.month == month, Invoice.year == year).order_by(Invoice.id)
    )
    return result.scalars().all()


def test_next_run_is_first_of_next_month():
    assert next_run_after(datetime(2024, 1, 15, 10, 30)) == datetime(2024, 2, 1)
    assert next_run_after(datetime(2024, 1, 31, 23, 59)) == datetime(2024, 2, 1)
    assert next_run_after(datetime(2024, 12, 1, 0, 0)) == datetime(2025, 1, 1)


@pytest.mark.asyncio
async def test_sweep_bills_rent_only_without_usage(async_session, contract):
    created = await run_invoice_sweep(async_session, 3, 2024)

    assert created == 1
    [invoice] = await invoices_for(async_session, 3, 2024)
    assert invoice.usage_id is None
    assert invoice.electric_usage == 0
    assert invoice.water_usage == 0
    assert invoice.total_amount == Decimal("2000000")
    assert invoice.due_date == date(2024, 4, 7)


@pytest.mark.asyncio
async def test_sweep_uses_period_usage_and_current_prices(async_session, landlord, tenant, room):
    # Reading arrives before anyone rents the room, so nothing is billed yet
    usage = await submit_manual_reading(async_session, room.id, 5, 2024, electric_end=40, water_end=3)
    await create_contract(
        async_session, landlord.id, tenant.id, room.id,
        start_date=date(2024, 5, 1), monthly_rent=1800000,
    )
    room.electric_price = Decimal("4000")
    await async_session.commit()

    assert await run_invoice_sweep(async_session, 5, 2024) == 1

    [invoice] = await invoices_for(async_session, 5, 2024)
    assert invoice.usage_id == usage.id
    assert invoice.room_price == Decimal("1800000")
    assert invoice.electric_total == Decimal("160000")
    assert invoice.water_total == Decimal("75000")
    assert invoice.total_amount == Decimal("2035000")


@pytest.mark.asyncio
async def test_sweep_twice_creates_no_duplicates(async_session, contract):
    assert await run_invoice_sweep(async_session, 3, 2024) == 1
    assert await run_invoice_sweep(async_session, 3, 2024) == 0

    assert len(await invoices_for(async_session, 3, 2024)) == 1


@pytest.mark.asyncio
async def test_sweep_skips_period_already_billed_by_reading(async_session, room, contract):
    await submit_manual_reading(async_session, room.id, 3, 2024, electric_end=10, water_end=1)

    assert await run_invoice_sweep(async_session, 3, 2024) == 0
    assert len(await invoices_for(async_session, 3, 2024)) == 1


@pytest.mark.asyncio
async def test_sweep_ignores_inactive_contracts(async_session, contract):
    await terminate_contract(async_session, contract.id)

    assert await run_invoice_sweep(async_session, 3, 2024) == 0


@pytest.mark.asyncio
async def test_one_failing_contract_does_not_stop_sweep(async_session, landlord, tenant, room, contract, monkeypatch):
    other_room = await create_room(async_session, landlord.id, "102", price=1500000)
    second = await create_contract(
        async_session, landlord.id, tenant.id, other_room.id,
        start_date=date(2024, 1, 1), monthly_rent=1500000,
    )
    failing_id, second_id = contract.id, second.id

    original = cron.insert_invoice

    async def flaky(session, **kwargs):
        if kwargs["contract_id"] == failing_id:
            raise RuntimeError("boom")
        return await original(session, **kwargs)

    monkeypatch.setattr(cron, "insert_invoice", flaky)

    assert await run_invoice_sweep(async_session, 3, 2024) == 1

    result = await async_session.execute(select(Invoice.contract_id))
    assert result.scalars().all() == [second_id]


@pytest.mark.asyncio
async def test_monthly_job_bills_current_month(session_factory, async_session, contract):
    created = await monthly_invoice_job(session_factory, today=date(2024, 5, 1))

    assert created == 1
    result = await async_session.execute(select(func.count(Invoice.id)).where(Invoice.month == 5))
    assert result.scalar() == 1


@pytest.mark.asyncio
async def test_sweep_bills_new_tenant_after_mid_month_handover(async_session, landlord, room, contract):
    # First tenant's invoice takes the period's usage row
    usage = await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 3, 10))
    await terminate_contract(async_session, contract.id)

    newcomer = await create_tenant(async_session, "Le Van Newcomer", "0900000005")
    handover = await create_contract(
        async_session, landlord.id, newcomer.id, room.id,
        start_date=date(2024, 3, 15), monthly_rent=2200000,
    )

    assert await run_invoice_sweep(async_session, 3, 2024) == 1

    invoice = await get_invoice_for_period(async_session, handover.id, 3, 2024)
    assert invoice is not None
    assert invoice.tenant_id == newcomer.id
    assert invoice.usage_id is None
    assert invoice.electric_usage == 0
    assert invoice.water_usage == 0
    assert invoice.total_amount == Decimal("2200000")

    first = await get_invoice_for_period(async_session, contract.id, 3, 2024)
    assert first.usage_id == usage.id
    assert len(await invoices_for(async_session, 3, 2024)) == 2


@pytest.mark.asyncio
async def test_invoice_written_by_concurrent_trigger_is_not_counted(async_session, contract, monkeypatch):
    await create_invoice(
        async_session,
        contract_id=contract.id, tenant_id=contract.tenant_id, room_id=contract.room_id,
        month=3, year=2024, room_price=2000000,
        electric_usage=0, electric_price=3500, water_usage=0, water_price=25000,
    )

    # The other trigger commits between the sweep's lookup and its insert
    async def not_seen_yet(session, contract_id, month, year):
        return None

    monkeypatch.setattr(cron, "get_invoice_for_period", not_seen_yet)

    assert await run_invoice_sweep(async_session, 3, 2024) == 0
    assert len(await invoices_for(async_session, 3, 2024)) == 1
