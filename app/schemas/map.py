from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

class MapFocusTarget(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    zoom: int = Field(..., ge=0, le=22)

class MarkerStyle(str, Enum):
    primary = "primary"      # single-property context
    secondary = "secondary"  # list/search context

class MapMarker(BaseModel):
    property_id: str
    lat: float
    lng: float
    style: MarkerStyle
    title: Optional[str] = None
    location: str
    price_label: str
    image_url: str
