import pytest
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, func

from roomrent.database.models import Usage, Invoice, InvoiceStatus
from roomrent.errors import NotFoundError, ValidationError
from roomrent.services import invoice_service
from roomrent.services.usage_service import (
    submit_auto_reading, submit_manual_reading, find_previous_usage,
    compute_consumption, list_usages, list_usages_for_landlord, get_usage
)


async def count_rows(session, model):
    result = await session.execute(select(func.count(model.id)))
    return result.scalar()


def test_compute_consumption_clamps_only_when_asked():
    assert compute_consumption(100, 90, clamp=True) == 0
    assert compute_consumption(100, 90, clamp=False) == -10
    assert compute_consumption(None, 15, clamp=True) == 15


@pytest.mark.asyncio
async def test_auto_reading_first_period_bills_active_contract(async_session, room, contract):
    """First sensor report: starts at 0 and derives the invoice"""
    usage = await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 15, 8, 30))

    assert (usage.month, usage.year) == (1, 2024)
    assert usage.electric_start == 0
    assert usage.electric_end == 100
    assert usage.electric_usage == 100
    assert usage.water_start == 0
    assert usage.water_end == 10
    assert usage.water_usage == 10
    assert usage.is_auto is True

    invoice = await invoice_service.get_invoice_for_period(async_session, contract.id, 1, 2024)
    assert invoice is not None
    assert invoice.usage_id == usage.id
    assert invoice.electric_total == Decimal("350000")
    assert invoice.water_total == Decimal("250000")
    assert invoice.total_amount == Decimal("2600000")
    assert invoice.status == InvoiceStatus.PENDING.value
    assert invoice.due_date == date(2024, 2, 7)


@pytest.mark.asyncio
async def test_auto_reading_carries_forward_previous_end(async_session, room):
    await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 20))
    usage = await submit_auto_reading(async_session, room.id, 150, 14, datetime(2024, 2, 20))

    assert usage.electric_start == 100
    assert usage.electric_end == 150
    assert usage.electric_usage == 50
    assert usage.water_start == 10
    assert usage.water_end == 14
    assert usage.water_usage == 4


@pytest.mark.asyncio
async def test_auto_reading_clamps_meter_reset(async_session, room):
    await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 20))
    usage = await submit_auto_reading(async_session, room.id, 90, 12, datetime(2024, 2, 20))

    assert usage.electric_usage == 0
    assert usage.water_usage == 2


@pytest.mark.asyncio
async def test_carry_forward_looks_across_years(async_session, room):
    await submit_auto_reading(async_session, room.id, 500, 40, datetime(2023, 11, 5))
    await submit_auto_reading(async_session, room.id, 600, 45, datetime(2023, 12, 5))

    previous = await find_previous_usage(async_session, room.id, 1, 2024)
    assert (previous.month, previous.year) == (12, 2023)

    usage = await submit_auto_reading(async_session, room.id, 650, 47, datetime(2024, 1, 5))
    assert usage.electric_start == 600
    assert usage.electric_usage == 50


@pytest.mark.asyncio
async def test_same_period_resubmission_updates_in_place(async_session, room, contract):
    first = await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 10))
    second = await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 25))

    assert second.id == first.id
    assert second.electric_usage == 100
    assert await count_rows(async_session, Usage) == 1
    assert await count_rows(async_session, Invoice) == 1


@pytest.mark.asyncio
async def test_manual_reading_negative_consumption_is_kept(async_session, room):
    usage = await submit_manual_reading(
        async_session, room.id, 3, 2024,
        electric_start=50, electric_end=40,
        water_start=5, water_end=8,
    )

    assert usage.electric_usage == -10
    assert usage.water_usage == 3
    assert usage.is_auto is False


@pytest.mark.asyncio
async def test_manual_reading_omitted_start_defaults_per_utility(async_session, room):
    usage = await submit_manual_reading(
        async_session, room.id, 3, 2024,
        electric_end=120, water_end=9, water_start=4,
    )

    assert usage.electric_start == 0
    assert usage.electric_usage == 120
    assert usage.water_start == 4
    assert usage.water_usage == 5


@pytest.mark.asyncio
async def test_manual_reading_replaces_auto_reading(async_session, room):
    await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 4, 1))
    usage = await submit_manual_reading(async_session, room.id, 4, 2024, electric_end=80, water_end=7)

    assert usage.is_auto is False
    assert usage.electric_end == 80
    assert await count_rows(async_session, Usage) == 1


@pytest.mark.asyncio
async def test_manual_reading_rejects_bad_month(async_session, room):
    with pytest.raises(ValidationError):
        await submit_manual_reading(async_session, room.id, 13, 2024, electric_end=1, water_end=1)


@pytest.mark.asyncio
async def test_readings_for_unknown_room(async_session):
    with pytest.raises(NotFoundError):
        await submit_manual_reading(async_session, 999, 1, 2024, electric_end=1, water_end=1)
    with pytest.raises(NotFoundError):
        await submit_auto_reading(async_session, 999, 1, 1)


@pytest.mark.asyncio
async def test_reading_without_contract_is_not_billed(async_session, room):
    await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 15))

    assert await count_rows(async_session, Usage) == 1
    assert await count_rows(async_session, Invoice) == 0


@pytest.mark.asyncio
async def test_invoice_failure_does_not_fail_reading(async_session, room, contract, monkeypatch):
    async def broken(session, usage):
        raise RuntimeError("database hiccup")

    monkeypatch.setattr(invoice_service, "generate_for_usage", broken)

    usage = await submit_auto_reading(async_session, room.id, 100, 10, datetime(2024, 1, 15))

    assert usage.electric_usage == 100
    assert await count_rows(async_session, Usage) == 1
    assert await count_rows(async_session, Invoice) == 0


@pytest.mark.asyncio
async def test_usage_queries(async_session, landlord, room):
    await submit_auto_reading(async_session, room.id, 100, 10, datetime(2023, 12, 1))
    await submit_auto_reading(async_session, room.id, 150, 12, datetime(2024, 2, 1))
    await submit_auto_reading(async_session, room.id, 120, 11, datetime(2024, 1, 1))

    usages = await list_usages(async_session, room.id)
    assert [(u.month, u.year) for u in usages] == [(2, 2024), (1, 2024), (12, 2023)]

    owned = await list_usages_for_landlord(async_session, landlord.id)
    assert len(owned) == 3

    assert (await get_usage(async_session, usages[0].id)).electric_end == 150
    with pytest.raises(NotFoundError):
        await get_usage(async_session, 999)
