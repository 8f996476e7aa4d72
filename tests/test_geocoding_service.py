import pytest

from roomrent.services.geocoding_service import GeocodingService, RateLimiter, Coordinates


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def make_service(responses, clock=None):
    clock = clock or FakeClock()
    service = GeocodingService(RateLimiter(1.0, clock=clock, sleep=clock.sleep), country_suffix="Vietnam")
    queries = []

    async def fake_fetch(query):
        queries.append(query)
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    service._fetch = fake_fetch
    return service, queries, clock


@pytest.mark.asyncio
async def test_resolves_first_result():
    service, queries, _ = make_service([[{"lat": "10.7769", "lon": "106.7009"}]])

    coords = await service.resolve_coordinates("Ben Nghe, District 1")

    assert coords == Coordinates(latitude=10.7769, longitude=106.7009)
    assert queries == ["Ben Nghe, District 1, Vietnam"]


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    [],
    None,
    {"error": "bad request"},
    [{"lat": "abc", "lon": "106.7"}],
    [{"lat": "nan", "lon": "106.7"}],
    [{"display_name": "no coordinates"}],
    ConnectionError("network down"),
])
async def test_failures_resolve_to_none(response):
    service, _, _ = make_service([response])

    assert await service.resolve_coordinates("Somewhere") is None


@pytest.mark.asyncio
async def test_blank_address_skips_provider():
    service, queries, _ = make_service([])

    assert await service.resolve_coordinates("   ") is None
    assert await service.resolve_room_address(None, "", None) is None
    assert queries == []


@pytest.mark.asyncio
async def test_calls_are_spaced_one_second_apart():
    ok = [{"lat": "1", "lon": "2"}]
    service, _, clock = make_service([ok, ok, ok])

    await service.resolve_coordinates("A")
    clock.now += 0.25
    await service.resolve_coordinates("B")
    clock.now += 5
    await service.resolve_coordinates("C")

    assert clock.sleeps == [0.75]


@pytest.mark.asyncio
async def test_services_share_one_limiter():
    clock = FakeClock()
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)
    first = GeocodingService(limiter)
    second = GeocodingService(limiter)

    await first.rate_limiter.wait()
    await second.rate_limiter.wait()

    assert clock.sleeps == [1.0]


def test_build_address_skips_blanks():
    assert GeocodingService.build_address("Ben Nghe", " ", "Ho Chi Minh City") == "Ben Nghe, Ho Chi Minh City"
