import json
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse
from structlog import get_logger

from app.config import settings
from app.dependencies.criteria import get_criteria
from app.dependencies.rate_limit import map_limiter
from app.exceptions import PropertyNotFoundError, RepositoryUnavailableError
from app.routers.listings import load_all
from app.schemas.listing import FilterCriteria
from app.schemas.map import MapFocusTarget, MapMarker
from app.services.listing import filter_and_sort
from app.services.map_viewport import PROPERTY_ZOOM, MapViewportController, RecordingMapWidget
from app.services.repository import PropertyRepository, get_repository

logger = get_logger()
router = APIRouter(prefix="/api/v1/map", tags=["map"])

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"


async def build_controller(
    repository: PropertyRepository,
    criteria: FilterCriteria,
    property_id: Optional[str] = None,
) -> MapViewportController:
    """Single-property context when `property_id` is given, otherwise the filtered collection."""
    if property_id is not None:
        try:
            record = await repository.get_by_id(property_id)
        except PropertyNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found or has been deleted")
        except RepositoryUnavailableError as e:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
        controller = MapViewportController(properties=[record], property=record)
    else:
        controller = MapViewportController(properties=filter_and_sort(await load_all(repository), criteria))

    start = controller.initial_viewport(settings.DEFAULT_MAP_LAT, settings.DEFAULT_MAP_LNG)
    controller.on_map_load(RecordingMapWidget(start.lat, start.lng, start.zoom))
    return controller


def apply_focus(
    controller: MapViewportController,
    location: Optional[str],
    focus_id: Optional[str],
    lat: Optional[float],
    lng: Optional[float],
    zoom: int,
) -> None:
    if focus_id:
        controller.focus_property(focus_id)
    elif location:
        controller.focus_by_location_name(location)
    elif lat is not None and lng is not None:
        controller.focus_location(lat, lng, zoom)


@router.get("/focus", response_model=Optional[MapFocusTarget], dependencies=[Depends(map_limiter)])
async def focus(
    location: Optional[str] = Query(None, description="Focus on the first listing whose location contains this text"),
    focus_id: Optional[str] = Query(None, description="Focus on this listing and make it the active marker"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    zoom: int = Query(PROPERTY_ZOOM, ge=0, le=22),
    criteria: FilterCriteria = Depends(get_criteria),
    repository: PropertyRepository = Depends(get_repository),
):
    """Resolve a focus request to a viewport. Returns null when the request does not move the map."""
    controller = await build_controller(repository, criteria)
    apply_focus(controller, location, focus_id, lat, lng, zoom)
    logger.info("Map focus resolved", location=location, focus_id=focus_id, focused=controller.focus is not None)
    return controller.focus


@router.get("/markers", response_model=List[MapMarker], dependencies=[Depends(map_limiter)])
async def markers(
    property_id: Optional[str] = Query(None, description="Single-property context"),
    criteria: FilterCriteria = Depends(get_criteria),
    repository: PropertyRepository = Depends(get_repository),
):
    controller = await build_controller(repository, criteria, property_id)
    return controller.markers()


def _html_page(viewport: MapFocusTarget, markers: List[MapMarker], active_id: Optional[str]) -> str:
    # "</" would end the script block early
    marker_json = json.dumps([m.model_dump(mode="json") for m in markers]).replace("</", "<\\/")
    active_json = json.dumps(active_id)
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset=\"utf-8\" />
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\" />
  <title>Map Preview</title>
  <link rel=\"stylesheet\" href=\"https://unpkg.com/leaflet@1.9.4/dist/leaflet.css\" crossorigin=\"\" />
  <style>html, body, #map {{ height: 100%; margin: 0; }}</style>
</head>
<body>
<div id=\"map\"></div>
<script src=\"https://unpkg.com/leaflet@1.9.4/dist/leaflet.js\" crossorigin=\"\"></script>
<script>
  const markers = {marker_json};
  const activeId = {active_json};
  const map = L.map('map').setView([{viewport.lat}, {viewport.lng}], {viewport.zoom});
  L.tileLayer('{TILE_URL}', {{
    maxZoom: 19,
    attribution: '&copy; OpenStreetMap contributors'
  }}).addTo(map);
  const colors = {{ primary: '#d9342b', secondary: '#2b6cd9' }};
  markers.forEach((m) => {{
    const marker = L.circleMarker([m.lat, m.lng], {{
      radius: m.style === 'primary' ? 10 : 7,
      color: colors[m.style],
      fillOpacity: 0.8
    }}).addTo(map);
    const popup = document.createElement('div');
    const title = document.createElement('strong');
    title.textContent = m.title || '';
    const place = document.createElement('div');
    place.textContent = m.location;
    const price = document.createElement('div');
    price.textContent = m.price_label;
    const photo = document.createElement('img');
    photo.src = m.image_url;
    photo.width = 160;
    popup.append(photo, title, place, price);
    marker.bindPopup(popup);
    if (m.property_id === activeId) marker.openPopup();
  }});
</script>
</body>
</html>
"""


@router.get("/preview", response_class=HTMLResponse, dependencies=[Depends(map_limiter)])
async def map_preview(
    property_id: Optional[str] = Query(None, description="Single-property context"),
    location: Optional[str] = Query(None),
    focus_id: Optional[str] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    zoom: int = Query(PROPERTY_ZOOM, ge=3, le=19),
    criteria: FilterCriteria = Depends(get_criteria),
    repository: PropertyRepository = Depends(get_repository),
):
    """
    Unauthenticated HTML page showing the listing markers, opened on the requested focus.
    """
    controller = await build_controller(repository, criteria, property_id)
    apply_focus(controller, location, focus_id, lat, lng, zoom)
    viewport = controller.focus or controller.initial_viewport(settings.DEFAULT_MAP_LAT, settings.DEFAULT_MAP_LNG)
    active = controller.active_marker
    return HTMLResponse(content=_html_page(viewport, controller.markers(), active.id if active else None))
