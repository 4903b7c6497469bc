from typing import Optional

from fastapi import Query

from app.schemas.listing import ALL_LOCATIONS, ALL_STATUS, ALL_TYPES, FilterCriteria, SortOrder

async def get_criteria(
    keyword: str = Query("", description="Case-insensitive text matched against title, description, location, neighborhood, type and city"),
    location: str = Query(ALL_LOCATIONS),
    status: str = Query(ALL_STATUS),
    type: str = Query(ALL_TYPES),
    # Raw strings on purpose: anything non-numeric means "no bound"
    min_price: Optional[str] = Query(None),
    max_price: Optional[str] = Query(None),
    min_bedrooms: Optional[str] = Query(None),
    min_bathrooms: Optional[str] = Query(None),
    sort_order: SortOrder = Query(SortOrder.date_new_to_old),
    page: int = Query(1, description="1-based; clamped to the available pages"),
) -> FilterCriteria:
    return FilterCriteria(
        keyword=keyword,
        location=location,
        status=status,
        type=type,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        min_bathrooms=min_bathrooms,
        sort_order=sort_order,
        page=page,
    )
