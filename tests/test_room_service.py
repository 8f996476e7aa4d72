import pytest
from decimal import Decimal

from sqlalchemy import select, func

from roomrent.database.models import Room, RoomStatus, Usage
from roomrent.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from roomrent.services.contract_service import terminate_contract
from roomrent.services.geocoding_service import Coordinates
from roomrent.services.room_service import (
    create_room, update_room, delete_room, list_rooms, list_available_rooms, get_room
)
from roomrent.services.usage_service import submit_manual_reading


class FakeGeocoder:
    def __init__(self, result=Coordinates(10.77, 106.70)):
        self.result = result
        self.calls = []

    async def resolve_room_address(self, ward=None, district=None, province=None):
        self.calls.append((ward, district, province))
        return self.result


class FakeStorage:
    def __init__(self):
        self.stored = []
        self.deleted = []

    def store(self, data, folder="rooms"):
        self.stored.append(folder)
        return f"/uploads/{folder}/qr.png"

    def delete(self, url):
        self.deleted.append(url)


@pytest.mark.asyncio
async def test_create_room_geocodes_and_stores_qr(async_session, landlord):
    geocoder = FakeGeocoder()
    storage = FakeStorage()

    room = await create_room(
        async_session, landlord.id, "201", price="1500000",
        ward="Ben Nghe", district="District 1", province="Ho Chi Minh City",
        qr_code_image="data:image/png;base64,AAAA",
        geocoder=geocoder, storage=storage,
    )

    assert room.price == Decimal("1500000")
    assert (room.latitude, room.longitude) == (10.77, 106.70)
    assert room.qr_code_url == "/uploads/qr-codes/qr.png"
    assert room.status == RoomStatus.available.value
    assert geocoder.calls == [("Ben Nghe", "District 1", "Ho Chi Minh City")]


@pytest.mark.asyncio
async def test_create_room_without_coordinates(async_session, landlord):
    room = await create_room(
        async_session, landlord.id, "202", price=1000000,
        province="Nowhere", geocoder=FakeGeocoder(result=None),
    )

    assert room.latitude is None
    assert room.longitude is None


@pytest.mark.asyncio
async def test_create_room_rejects_occupied_and_unknown_landlord(async_session, landlord):
    with pytest.raises(ValidationError):
        await create_room(async_session, landlord.id, "203", price=1, status=RoomStatus.occupied)
    with pytest.raises(NotFoundError):
        await create_room(async_session, 999, "203", price=1)


@pytest.mark.asyncio
async def test_update_room_regeocodes_on_address_change(async_session, landlord, room):
    geocoder = FakeGeocoder()

    updated = await update_room(async_session, room.id, landlord.id, geocoder=geocoder, price=2500000)
    assert updated.price == Decimal("2500000")
    assert geocoder.calls == []

    updated = await update_room(async_session, room.id, landlord.id, geocoder=geocoder, ward="Da Kao")
    assert updated.latitude == 10.77
    assert len(geocoder.calls) == 1


@pytest.mark.asyncio
async def test_update_room_checks_owner_and_fields(async_session, landlord, room):
    landlord_id, room_id = landlord.id, room.id

    with pytest.raises(ForbiddenError):
        await update_room(async_session, room_id, landlord_id + 1, price=1)
    with pytest.raises(ValidationError):
        await update_room(async_session, room_id, landlord_id, landlord_id=5)

    maintenance = await update_room(async_session, room_id, landlord_id, status="maintenance")
    assert maintenance.status == RoomStatus.maintenance.value


@pytest.mark.asyncio
async def test_available_rooms_listing(async_session, landlord, room, contract):
    spare = await create_room(async_session, landlord.id, "102", price=1000000)

    assert [r.id for r in await list_available_rooms(async_session)] == [spare.id]
    assert len(await list_rooms(async_session, landlord_id=landlord.id)) == 2
    assert [r.id for r in await list_rooms(async_session, status=RoomStatus.occupied)] == [room.id]


@pytest.mark.asyncio
async def test_delete_room_blocked_by_active_contract(async_session, landlord, room, contract):
    landlord_id, room_id = landlord.id, room.id

    with pytest.raises(ConflictError):
        await delete_room(async_session, room_id, landlord_id)

    assert (await get_room(async_session, room_id)).id == room_id


@pytest.mark.asyncio
async def test_delete_room_removes_history_and_qr(async_session, landlord, room, contract):
    await submit_manual_reading(async_session, room.id, 1, 2024, electric_end=10, water_end=1)
    await terminate_contract(async_session, contract.id)
    room.qr_code_url = "/uploads/qr-codes/old.png"
    await async_session.commit()
    landlord_id, room_id = landlord.id, room.id
    storage = FakeStorage()

    await delete_room(async_session, room_id, landlord_id, storage=storage)

    result = await async_session.execute(select(func.count(Room.id)))
    assert result.scalar() == 0
    result = await async_session.execute(select(func.count(Usage.id)))
    assert result.scalar() == 0
    assert storage.deleted == ["/uploads/qr-codes/old.png"]

    with pytest.raises(NotFoundError):
        await get_room(async_session, room_id)
