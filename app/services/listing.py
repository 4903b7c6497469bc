"""
Listing view pipeline: filter, sort and paginate a property collection.

Every function here is pure. The caller owns the collection and the
criteria; nothing is mutated and nothing is cached between calls.
"""
import math
from typing import Iterable, List, Optional, Sequence

from structlog import get_logger

from app.config import settings
from app.schemas.listing import (
    ALL_LOCATIONS,
    ALL_STATUS,
    ALL_TYPES,
    BoundInput,
    FilterCriteria,
    ListingView,
    SortOrder,
)
from app.schemas.property import PropertyRecord

logger = get_logger()

PAGE_SIZE = settings.PAGE_SIZE


def parse_bound(value: BoundInput) -> Optional[float]:
    """Read a numeric bound typed by a user. Anything that is not a finite number is no bound."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _keyword_fields(record: PropertyRecord) -> Iterable[Optional[str]]:
    return (
        record.title,
        record.description,
        record.location,
        record.neighborhood,
        record.type.value,
        record.city,
    )


def matches_keyword(record: PropertyRecord, keyword: str) -> bool:
    # Blank means no filter; otherwise the keyword is matched as typed, spaces included
    if not keyword.strip():
        return True
    needle = keyword.lower()
    return any(field and needle in field.lower() for field in _keyword_fields(record))


def matches_location(record: PropertyRecord, location: str) -> bool:
    if location == ALL_LOCATIONS:
        return True
    return record.city == location or location in record.location


def sort_records(records: Sequence[PropertyRecord], sort_order: SortOrder) -> List[PropertyRecord]:
    # sorted() is stable and reverse=True keeps equal keys in input order
    if sort_order == SortOrder.price_low_to_high:
        return sorted(records, key=lambda r: r.price)
    if sort_order == SortOrder.price_high_to_low:
        return sorted(records, key=lambda r: r.price, reverse=True)
    return sorted(records, key=lambda r: r.created_at_millis, reverse=True)


def count_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(page, 1), total_pages)


def page_numbers(current: int, total: int, max_visible: int = 5) -> List[Optional[int]]:
    """Compact pagination strip. None stands for an ellipsis.

    The first and last pages are always shown; the window around the
    current page is slid left when it would run past the end.
    """
    if total <= max_visible:
        return list(range(1, total + 1))

    start = max(2, current - max_visible // 2)
    end = min(total - 1, start + max_visible - 3)
    if end - start < max_visible - 3:
        start = max(2, end - (max_visible - 3))

    strip: List[Optional[int]] = [1]
    if start > 2:
        strip.append(None)
    strip.extend(range(start, end + 1))
    if end < total - 1:
        strip.append(None)
    strip.append(total)
    return strip


def available_cities(all_properties: Iterable[PropertyRecord]) -> List[str]:
    """Distinct cities in first-seen order, falling back to the first part of `location`."""
    seen = {}
    for record in all_properties:
        city = record.city or record.location.split(",")[0].strip()
        if city and city not in seen:
            seen[city] = None
    return list(seen)


def filter_and_sort(all_properties: Sequence[PropertyRecord], criteria: FilterCriteria) -> List[PropertyRecord]:
    records = list(all_properties)

    if criteria.type != ALL_TYPES:
        records = [r for r in records if r.type == criteria.type]

    if criteria.status != ALL_STATUS:
        records = [r for r in records if r.status == criteria.status]

    if criteria.location != ALL_LOCATIONS:
        records = [r for r in records if matches_location(r, criteria.location)]

    min_price = parse_bound(criteria.min_price)
    max_price = parse_bound(criteria.max_price)
    if min_price is not None:
        records = [r for r in records if r.price >= min_price]
    if max_price is not None:
        records = [r for r in records if r.price <= max_price]

    min_bedrooms = parse_bound(criteria.min_bedrooms)
    min_bathrooms = parse_bound(criteria.min_bathrooms)
    if min_bedrooms is not None:
        records = [r for r in records if r.bedrooms >= min_bedrooms]
    if min_bathrooms is not None:
        records = [r for r in records if r.bathrooms >= min_bathrooms]

    records = sort_records(records, criteria.sort_order)

    # Keyword runs last and only removes records, so the sort order holds
    if criteria.keyword.strip():
        records = [r for r in records if matches_keyword(r, criteria.keyword)]

    return records


def paginate(filtered: Sequence[PropertyRecord], page: int, cities: List[str]) -> ListingView:
    total_count = len(filtered)
    total_pages = count_pages(total_count)
    page = clamp_page(page, total_pages)
    start = (page - 1) * PAGE_SIZE

    logger.debug("Listing view computed", total_count=total_count, total_pages=total_pages, page=page)
    return ListingView(
        page_items=list(filtered[start:start + PAGE_SIZE]),
        total_count=total_count,
        total_pages=total_pages,
        page=page,
        available_cities=cities,
        page_numbers=page_numbers(page, total_pages),
    )


def compute_view(
    all_properties: Sequence[PropertyRecord],
    criteria: FilterCriteria,
    cities: Optional[List[str]] = None,
) -> ListingView:
    """Turn the full collection and the current criteria into one page of results.

    `cities` may be passed in when the caller already derived them from the
    same unfiltered collection.
    """
    if cities is None:
        cities = available_cities(all_properties)
    return paginate(filter_and_sort(all_properties, criteria), criteria.page, cities)


def format_price(price: float) -> str:
    return f"₱{price:,.0f}"


def resolve_image_url(path: Optional[str]) -> str:
    if not path:
        return settings.PLACEHOLDER_IMAGE
    if path.startswith(("http://", "https://", "data:")):
        return path
    return f"{settings.IMAGE_BASE_URL.rstrip('/')}/{path.lstrip('/')}"
