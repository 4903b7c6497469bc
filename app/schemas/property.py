from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

class PropertyType(str, Enum):
    condominium = "Condominium"
    villa = "Villa"
    single_family = "Single Family"
    townhouse = "Townhouse"
    land = "Land"
    apartment = "Apartment"

class PropertyStatus(str, Enum):
    for_sale = "For Sale"
    for_rent = "For Rent"
    sold = "Sold"
    rented = "Rented"

class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

class Agent(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None

CreatedAt = Union[int, float, datetime, str, None]

_NUMERIC_FIELDS = ("bedrooms", "bathrooms", "area", "parking_spaces", "year_built")
_LIST_FIELDS = ("tags", "amenities", "images")


def _to_millis(value: CreatedAt) -> float:
    """Normalise a createdAt value (epoch millis, ISO string or datetime) to epoch millis.

    Missing or unparseable values count as the epoch.
    """
    if value is None:
        return 0
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000
    if isinstance(value, (int, float)):
        return value
    text = value.strip()
    if not text:
        return 0
    try:
        return float(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return 0
    return _to_millis(parsed)


class PropertyFields(BaseModel):
    """Listing content without an identity; also the body of a new submission.

    Accepts camelCase keys as well as snake_case names.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: Optional[str] = None
    description: str = ""
    location: str
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")
    type: PropertyType
    status: PropertyStatus
    price: int = Field(..., ge=0)
    bedrooms: int = Field(0, ge=0)
    bathrooms: float = Field(0, ge=0)
    area: float = Field(0, ge=0)
    parking_spaces: int = Field(0, ge=0, alias="parkingSpaces")
    year_built: int = Field(0, ge=0, alias="yearBuilt")
    coordinates: Optional[Coordinates] = None
    created_at: CreatedAt = Field(None, alias="createdAt")
    tags: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    is_featured: bool = Field(False, alias="isFeatured")
    property_code: Optional[str] = Field(None, alias="propertyId")
    view_type: Optional[str] = Field(None, alias="viewType")
    agent: Optional[Agent] = None
    owner_id: Optional[str] = Field(None, alias="ownerId")

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _absent_number_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def _absent_list_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("zip_code", "owner_id", mode="before")
    @classmethod
    def _coerce_str(cls, value):
        return str(value) if isinstance(value, (int, float)) else value

    @property
    def created_at_millis(self) -> float:
        return _to_millis(self.created_at)


class PropertyRecord(PropertyFields):
    """One listing as stored in either listing table."""

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value) if isinstance(value, (int, float)) else value
