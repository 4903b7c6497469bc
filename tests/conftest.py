from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.dependencies.auth import get_current_user
from app.dependencies.rate_limit import ALL_LIMITERS
from app.main import app
from app.schemas.property import PropertyRecord
from app.services.favorites import FavoritesStore, get_favorites_store
from app.services.repository import PropertyRepository, get_repository

MOCK_USER = {"id": "user-1", "role": "Tenant"}


def _record(id: str, **overrides) -> PropertyRecord:
    data = {
        "id": id,
        "title": f"Listing {id}",
        "location": "Somewhere, Philippines",
        "type": "Condominium",
        "status": "For Sale",
        "price": 1_000_000,
    }
    data.update(overrides)
    return PropertyRecord.model_validate(data)


@pytest.fixture
def make_record():
    return _record


@pytest.fixture
def sample_properties():
    """Six listings in insertion order, newest last."""
    return [
        _record("makati", title="Modern Condo in Makati", location="Ayala Avenue, Makati City, Metro Manila",
                city="Makati", neighborhood="Ayala Center", price=12_500_000, bedrooms=2, bathrooms=2,
                coordinates={"lat": 14.55, "lng": 121.02}, createdAt=1_000, isFeatured=True,
                description="Walking distance to malls"),
        _record("cebu", title="Beachfront Villa in Cebu", location="Mactan Island, Lapu-Lapu City, Cebu",
                city="Cebu", type="Villa", price=35_000_000, bedrooms=4, bathrooms=5,
                coordinates={"lat": 10.3157, "lng": 123.9777}, createdAt=2_000, isFeatured=True),
        _record("vigan", title="Heritage House in Vigan", location="Calle Crisologo, Vigan City, Ilocos Sur",
                city="Vigan", type="Single Family", price=18_000_000, bedrooms=5, bathrooms=3,
                coordinates={"lat": 17.5747, "lng": 120.3871}, createdAt=3_000),
        _record("tagaytay", title="Modern Bungalow", location="Tagaytay City, Cavite",
                type="Single Family", status="For Rent", price=9_500_000, bedrooms=3, bathrooms=2,
                createdAt=4_000),
        _record("bgc", title="Luxury Townhouse in BGC", location="Bonifacio Global City, Taguig, Metro Manila",
                city="Taguig", type="Townhouse", price=25_000_000, bedrooms=3, bathrooms=4,
                coordinates={"lat": 14.5508, "lng": 121.0529}, createdAt=5_000, isFeatured=True),
        _record("batangas", title="Oceanfront Lot", location="Nasugbu, Batangas",
                city="Batangas", type="Land", status="Sold", price=15_000_000,
                coordinates={"lat": 14.076, "lng": 120.631}, createdAt=6_000),
    ]


class InMemoryRedis:
    """Just enough of the redis client for the favorites store."""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value
        return True


@pytest.fixture
def redis_store():
    return InMemoryRedis()


@pytest.fixture
def favorites_store(redis_store):
    return FavoritesStore(redis_store)


@pytest.fixture
def repository(sample_properties):
    repo = MagicMock(spec=PropertyRepository)
    repo.fetch_all.return_value = sample_properties
    repo.fetch_featured.return_value = [p for p in sample_properties if p.is_featured]
    repo.invalidate_cache.return_value = 1
    return repo


async def override_get_current_user():
    return MOCK_USER


async def _no_rate_limit():
    return None


@pytest_asyncio.fixture
async def client(repository, favorites_store):
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_favorites_store] = lambda: favorites_store
    app.dependency_overrides[get_current_user] = override_get_current_user
    for limiter in ALL_LIMITERS:
        app.dependency_overrides[limiter] = _no_rate_limit
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides = {}
