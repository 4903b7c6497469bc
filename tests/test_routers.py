from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import status

from app.exceptions import PropertyNotFoundError, RepositoryUnavailableError

UNAVAILABLE = "Failed to load properties. Please try again later."


@pytest.mark.asyncio
async def test_listing_view_defaults(client):
    response = await client.get("/api/v1/properties")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total_count"] == 6
    assert body["total_pages"] == 1
    assert body["page"] == 1
    assert body["page_numbers"] == [1]
    assert [p["id"] for p in body["page_items"]] == ["batangas", "bgc", "tagaytay", "vigan", "cebu", "makati"]
    assert body["available_cities"][0] == "Makati"


@pytest.mark.asyncio
async def test_listing_view_filters(client):
    response = await client.get(
        "/api/v1/properties",
        params={"location": "Metro Manila", "sort_order": "Price Low to High", "min_price": "abc"},
    )
    body = response.json()
    assert [p["id"] for p in body["page_items"]] == ["makati", "bgc"]
    assert len(body["available_cities"]) == 6


@pytest.mark.asyncio
async def test_listing_view_clamps_page(client):
    response = await client.get("/api/v1/properties", params={"page": 40})
    assert response.json()["page"] == 1


@pytest.mark.asyncio
async def test_listing_view_unknown_sort_order(client):
    response = await client.get("/api/v1/properties", params={"sort_order": "Random"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_listing_view_repository_down(client, repository):
    repository.fetch_all.side_effect = RepositoryUnavailableError(UNAVAILABLE)
    response = await client.get("/api/v1/properties")
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["detail"] == UNAVAILABLE


@pytest.mark.asyncio
async def test_featured(client):
    response = await client.get("/api/v1/properties/featured")
    assert [p["id"] for p in response.json()] == ["makati", "cebu", "bgc"]


@pytest.mark.asyncio
async def test_cities(client):
    response = await client.get("/api/v1/properties/cities")
    assert response.json() == ["Makati", "Cebu", "Vigan", "Tagaytay City", "Taguig", "Batangas"]


@pytest.mark.asyncio
async def test_property_detail(client, repository, sample_properties):
    repository.get_by_id.return_value = sample_properties[0]
    response = await client.get("/api/v1/properties/makati")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["id"] == "makati"
    assert body["isFeatured"] is True
    repository.get_by_id.assert_awaited_once_with("makati")


@pytest.mark.asyncio
async def test_property_detail_not_found(client, repository):
    repository.get_by_id.side_effect = PropertyNotFoundError("missing-id")
    response = await client.get("/api/v1/properties/missing-id")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Property not found or has been deleted"


@pytest.mark.asyncio
async def test_property_detail_unavailable(client, repository):
    repository.get_by_id.side_effect = RepositoryUnavailableError("Failed to load property details. Please try again later.")
    response = await client.get("/api/v1/properties/makati")
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


@pytest.mark.asyncio
async def test_map_focus_by_location_name(client):
    response = await client.get("/api/v1/map/focus", params={"location": "Makati"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"lat": 14.55, "lng": 121.02, "zoom": 13}


@pytest.mark.asyncio
async def test_map_focus_on_property(client):
    response = await client.get("/api/v1/map/focus", params={"focus_id": "cebu"})
    assert response.json() == {"lat": 10.3157, "lng": 123.9777, "zoom": 15}


@pytest.mark.asyncio
async def test_map_focus_unknown_property_is_null(client):
    response = await client.get("/api/v1/map/focus", params={"focus_id": "missing-id"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() is None


@pytest.mark.asyncio
async def test_map_focus_coordinates(client):
    response = await client.get("/api/v1/map/focus", params={"lat": 14.6, "lng": 121.0, "zoom": 12})
    assert response.json() == {"lat": 14.6, "lng": 121.0, "zoom": 12}


@pytest.mark.asyncio
async def test_map_focus_respects_filters(client):
    response = await client.get("/api/v1/map/focus", params={"location": "Cebu", "type": "Land"})
    assert response.json() is None


@pytest.mark.asyncio
async def test_map_markers(client):
    response = await client.get("/api/v1/map/markers", params={"status": "For Sale"})
    body = response.json()
    assert [m["property_id"] for m in body] == ["bgc", "vigan", "cebu", "makati"]
    assert {m["style"] for m in body} == {"secondary"}


@pytest.mark.asyncio
async def test_map_markers_single_property(client, repository, sample_properties):
    repository.get_by_id.return_value = sample_properties[1]
    response = await client.get("/api/v1/map/markers", params={"property_id": "cebu"})
    body = response.json()
    assert len(body) == 1
    assert body[0]["style"] == "primary"
    assert body[0]["price_label"] == "₱35,000,000"


@pytest.mark.asyncio
async def test_map_markers_missing_property(client, repository):
    repository.get_by_id.side_effect = PropertyNotFoundError("missing-id")
    response = await client.get("/api/v1/map/markers", params={"property_id": "missing-id"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_map_preview(client):
    response = await client.get("/api/v1/map/preview", params={"focus_id": "makati"})
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/html")
    assert "setView([14.55, 121.02], 15)" in response.text
    assert '"property_id": "cebu"' in response.text
    assert 'const activeId = "makati";' in response.text


@pytest.mark.asyncio
async def test_map_preview_escapes_script_end(client, repository, make_record):
    repository.fetch_all.return_value = [
        make_record("x", title="</script><b>", coordinates={"lat": 1, "lng": 2}),
    ]
    response = await client.get("/api/v1/map/preview")
    assert "</script><b>" not in response.text
    assert "<\\/script><b>" in response.text


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_cache_clear(client, repository):
    response = await client.post("/api/v1/cache/clear")
    assert response.json() == {"status": "ok", "cleared_keys": 1}
    repository.invalidate_cache.assert_awaited_once()


@pytest.mark.asyncio
@patch("app.routers.health.Redis")
@patch("app.routers.health.create_async_engine")
async def test_readiness_disposes_engine_when_database_is_down(mock_create_engine, mock_redis, client):
    mock_redis.from_url.return_value.ping = AsyncMock(return_value=True)
    engine = MagicMock()
    engine.connect.side_effect = OSError("connection refused")
    engine.dispose = AsyncMock()
    mock_create_engine.return_value = engine

    response = await client.get("/api/v1/health/ready")
    body = response.json()
    assert body["status"] == "degraded"
    assert body["checks"]["redis"] == "ok"
    assert body["checks"]["database"].startswith("fail")
    engine.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_markers_carry_image_url(client):
    response = await client.get("/api/v1/map/markers", params={"type": "Villa"})
    assert response.json()[0]["image_url"] == "/images/placeholder-property.jpg"
