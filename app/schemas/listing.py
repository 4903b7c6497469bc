from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.property import PropertyRecord

ALL_LOCATIONS = "All Main Locations"
ALL_STATUS = "All Status"
ALL_TYPES = "All Types"

# Raw form input: numbers, numeric strings, or junk that is ignored
BoundInput = Union[int, float, str, None]

class SortOrder(str, Enum):
    date_new_to_old = "Date New to Old"
    price_low_to_high = "Price Low to High"
    price_high_to_low = "Price High to Low"

class FilterCriteria(BaseModel):
    """Filter, sort and page selections of one listing view."""
    model_config = ConfigDict(validate_assignment=True)

    keyword: str = ""
    location: str = ALL_LOCATIONS
    status: str = ALL_STATUS
    type: str = ALL_TYPES
    min_price: BoundInput = None
    max_price: BoundInput = None
    min_bedrooms: BoundInput = None
    min_bathrooms: BoundInput = None
    sort_order: SortOrder = SortOrder.date_new_to_old
    page: int = 1

    def update(self, **changes) -> bool:
        """Apply changes in place; any change other than `page` sends the view back to page 1.

        Returns True when something actually changed.
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown criteria: {', '.join(sorted(unknown))}")
        # Validate the merged state first so a bad value leaves everything untouched
        merged = type(self).model_validate({**self.model_dump(), **changes})
        changed = [name for name in changes if getattr(self, name) != getattr(merged, name)]
        if not changed:
            return False
        if any(name != "page" for name in changed):
            merged.page = 1
        for name in type(self).model_fields:
            setattr(self, name, getattr(merged, name))
        return True

    def reset(self) -> None:
        for name, field in type(self).model_fields.items():
            setattr(self, name, field.get_default(call_default_factory=True))

class ListingView(BaseModel):
    page_items: List[PropertyRecord]
    total_count: int
    total_pages: int
    page: int
    available_cities: List[str]
    page_numbers: List[Optional[int]] = Field(default_factory=list, description="Pagination strip; null marks an ellipsis")
