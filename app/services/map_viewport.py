"""
Map viewport controller.

Keeps the map focus target and the active marker for one map view and
exposes the imperative focus operations the view coordinator calls.
Focus requests are best-effort: a missing map, record, match or
coordinate is a silent no-op.
"""
from typing import List, Optional, Protocol, Sequence

from pydantic import ValidationError
from structlog import get_logger

from app.schemas.map import MapFocusTarget, MapMarker, MarkerStyle
from app.schemas.property import PropertyRecord
from app.services.listing import format_price, resolve_image_url

logger = get_logger()

PROPERTY_ZOOM = 15
AREA_ZOOM = 13
LIST_ZOOM = 11


class MapWidget(Protocol):
    def pan_to(self, lat: float, lng: float) -> None: ...

    def set_zoom(self, level: int) -> None: ...


class RecordingMapWidget:
    """Server-side widget that only remembers where it was told to look."""

    def __init__(self, lat: float, lng: float, zoom: int):
        self.lat = lat
        self.lng = lng
        self.zoom = zoom

    def pan_to(self, lat: float, lng: float) -> None:
        self.lat = lat
        self.lng = lng

    def set_zoom(self, level: int) -> None:
        self.zoom = level

    def viewport(self) -> MapFocusTarget:
        return MapFocusTarget(lat=self.lat, lng=self.lng, zoom=self.zoom)


class MapViewportController:
    def __init__(self, properties: Sequence[PropertyRecord] = (), property: Optional[PropertyRecord] = None):
        self._properties: List[PropertyRecord] = list(properties)
        self._property = property
        self._widget: Optional[MapWidget] = None
        self._focus: Optional[MapFocusTarget] = None
        self._active: Optional[PropertyRecord] = None

    @property
    def ready(self) -> bool:
        return self._widget is not None

    @property
    def focus(self) -> Optional[MapFocusTarget]:
        return self._focus

    @property
    def active_marker(self) -> Optional[PropertyRecord]:
        return self._active

    def on_map_load(self, widget: MapWidget) -> None:
        self._widget = widget

    def set_properties(self, properties: Sequence[PropertyRecord]) -> None:
        self._properties = list(properties)

    def set_property(self, property: Optional[PropertyRecord]) -> None:
        self._property = property

    def focus_location(self, lat: float, lng: float, zoom: int = PROPERTY_ZOOM) -> bool:
        if self._widget is None:
            logger.debug("Focus ignored, map not ready", lat=lat, lng=lng)
            return False
        try:
            target = MapFocusTarget(lat=lat, lng=lng, zoom=zoom)
        except ValidationError:
            logger.debug("Focus ignored, target out of range", lat=lat, lng=lng, zoom=zoom)
            return False
        self._widget.pan_to(target.lat, target.lng)
        self._widget.set_zoom(target.zoom)
        # Each request replaces the previous target
        self._focus = target
        return True

    def focus_property(self, property_id: str) -> bool:
        record = next((p for p in self._properties if p.id == property_id), None)
        if record is None or record.coordinates is None:
            logger.debug("Focus ignored, property not focusable", property_id=property_id)
            return False
        if not self.focus_location(record.coordinates.lat, record.coordinates.lng, PROPERTY_ZOOM):
            return False
        self._active = record
        return True

    def focus_by_location_name(self, name: Optional[str]) -> bool:
        if not name or self._widget is None:
            return False
        needle = name.lower()
        first = next((p for p in self._properties if needle in p.location.lower()), None)
        if first is None or first.coordinates is None:
            logger.debug("Focus ignored, no located match", name=name)
            return False
        return self.focus_location(first.coordinates.lat, first.coordinates.lng, AREA_ZOOM)

    def toggle_active_marker(self, record: PropertyRecord) -> Optional[PropertyRecord]:
        if self._active is not None and self._active.id == record.id:
            self._active = None
        else:
            self._active = record
        return self._active

    def clear_active_marker(self) -> None:
        self._active = None

    def markers(self) -> List[MapMarker]:
        if self._property is not None:
            records, style = [self._property], MarkerStyle.primary
        else:
            records, style = self._properties, MarkerStyle.secondary
        return [
            MapMarker(
                property_id=r.id,
                lat=r.coordinates.lat,
                lng=r.coordinates.lng,
                style=style,
                title=r.title,
                location=r.location,
                price_label=format_price(r.price),
                image_url=resolve_image_url(r.images[0] if r.images else None),
            )
            for r in records
            if r.coordinates is not None
        ]

    def initial_viewport(self, default_lat: float, default_lng: float) -> MapFocusTarget:
        """Where the map opens: on the single property when there is one, else the default centre."""
        if self._property is not None:
            coords = self._property.coordinates
            return MapFocusTarget(
                lat=coords.lat if coords else default_lat,
                lng=coords.lng if coords else default_lng,
                zoom=PROPERTY_ZOOM,
            )
        return MapFocusTarget(lat=default_lat, lng=default_lng, zoom=LIST_ZOOM)
