"""
View coordinators.

A session owns the property snapshot and the criteria for one open view,
re-runs the listing pipeline whenever either changes, and relays user
actions to its map viewport controller. Sessions turn repository errors
into view state instead of raising them.
"""
from enum import Enum
from typing import List, Optional

from structlog import get_logger

from app.exceptions import RepositoryUnavailableError
from app.schemas.listing import FilterCriteria, ListingView
from app.schemas.property import PropertyRecord
from app.services.listing import available_cities, filter_and_sort, paginate
from app.services.map_viewport import MapViewportController
from app.services.repository import PropertyRepository, Unsubscribe

logger = get_logger()

NOT_FOUND_MESSAGE = "Property not found or has been deleted"
DETAIL_ERROR_MESSAGE = "Failed to load property details. Please try again later."


class ViewState(str, Enum):
    loading = "loading"
    ready = "ready"
    error = "error"
    not_found = "not_found"


class ListingSession:
    def __init__(
        self,
        repository: PropertyRepository,
        criteria: Optional[FilterCriteria] = None,
        viewport: Optional[MapViewportController] = None,
    ):
        self._repository = repository
        self.criteria = criteria or FilterCriteria()
        self.viewport = viewport or MapViewportController()
        self.state = ViewState.loading
        self.error: Optional[str] = None
        self.view: Optional[ListingView] = None
        self._properties: List[PropertyRecord] = []
        self._cities: List[str] = []
        self._closed = False

    async def load(self) -> Optional[ListingView]:
        try:
            records = await self._repository.fetch_all()
        except RepositoryUnavailableError as e:
            logger.error("Listing view could not load properties", error=e.message)
            self.state = ViewState.error
            self.error = e.message
            return None
        self.replace_collection(records)
        return self.view

    def replace_collection(self, records: List[PropertyRecord]) -> None:
        """Swap in a newer snapshot and re-run with the criteria already in place."""
        if self._closed:
            return
        self._properties = list(records)
        self._cities = available_cities(self._properties)
        self.error = None
        self._recompute()

    def update_criteria(self, **changes) -> Optional[ListingView]:
        if self.criteria.update(**changes) and self.state == ViewState.ready:
            self._recompute()
        return self.view

    def go_to_page(self, page: int) -> Optional[ListingView]:
        return self.update_criteria(page=page)

    def next_page(self) -> Optional[ListingView]:
        if self.view is not None and self.criteria.page < self.view.total_pages:
            return self.go_to_page(self.criteria.page + 1)
        return self.view

    def previous_page(self) -> Optional[ListingView]:
        if self.criteria.page > 1:
            return self.go_to_page(self.criteria.page - 1)
        return self.view

    def reset_filters(self) -> Optional[ListingView]:
        self.criteria.reset()
        if self.state == ViewState.ready:
            self._recompute()
        return self.view

    def submit_search(self, keyword: Optional[str] = None) -> bool:
        """Apply the keyword and point the map at the first listing whose location mentions it."""
        if keyword is not None:
            self.update_criteria(keyword=keyword)
        term = self.criteria.keyword
        return bool(term.strip()) and self.viewport.focus_by_location_name(term)

    def location_clicked(self, record: PropertyRecord) -> bool:
        if record.coordinates is None:
            return False
        return self.viewport.focus_location(record.coordinates.lat, record.coordinates.lng)

    def marker_clicked(self, record: PropertyRecord) -> Optional[PropertyRecord]:
        return self.viewport.toggle_active_marker(record)

    def close(self) -> None:
        self._closed = True

    def _recompute(self) -> None:
        filtered = filter_and_sort(self._properties, self.criteria)
        self.view = paginate(filtered, self.criteria.page, self._cities)
        # Keep the stored page inside [1, total_pages]
        if self.criteria.page != self.view.page:
            self.criteria.page = self.view.page
        # The map shows every filtered listing, not just the current page
        self.viewport.set_properties(filtered)
        self.state = ViewState.ready


class PropertyDetailSession:
    """Live view of one listing, kept current through a repository subscription."""

    def __init__(self, repository: PropertyRepository, property_id: str):
        self._repository = repository
        self.property_id = property_id
        self.state = ViewState.loading
        self.error: Optional[str] = None
        self.record: Optional[PropertyRecord] = None
        self.viewport = MapViewportController()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    async def open(self) -> "PropertyDetailSession":
        if self._closed:
            raise RuntimeError("Session already closed")
        if self._unsubscribe is None:
            self._unsubscribe = self._repository.subscribe(self.property_id, self._on_record)
        return self

    def close(self) -> None:
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def __aenter__(self) -> "PropertyDetailSession":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_record(self, record: Optional[PropertyRecord], error: Optional[Exception]) -> None:
        if self._closed:
            return
        if error is not None:
            logger.error("Watching property failed", property_id=self.property_id, error=str(error))
            self.state = ViewState.error
            self.error = DETAIL_ERROR_MESSAGE
            return
        if record is None:
            self.state = ViewState.not_found
            self.error = NOT_FOUND_MESSAGE
            self.record = None
            self.viewport.set_property(None)
            return
        self.state = ViewState.ready
        self.error = None
        self.record = record
        self.viewport.set_property(record)
