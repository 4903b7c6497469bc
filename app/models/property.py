import uuid

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Float, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
# Import Base from the common models file
from app.models import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class PropertyColumns:
    """Columns shared by the live and pending listing tables."""
    id = Column(String(64), primary_key=True, default=_new_id)
    title = Column(String(255))
    description = Column(Text, nullable=False, server_default="")
    location = Column(String(255), nullable=False)
    city = Column(String(120))
    neighborhood = Column(String(120))
    zip_code = Column(String(20))
    type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False)
    price = Column(BigInteger, nullable=False)
    bedrooms = Column(Integer, nullable=False, server_default="0")
    bathrooms = Column(Float, nullable=False, server_default="0")
    area = Column(Float, nullable=False, server_default="0")
    parking_spaces = Column(Integer, nullable=False, server_default="0")
    year_built = Column(Integer, nullable=False, server_default="0")
    lat = Column(Float)
    lng = Column(Float)
    tags = Column(JSONB, default=list)
    amenities = Column(JSONB, default=list)
    images = Column(JSONB, default=list)
    is_featured = Column(Boolean, nullable=False, server_default="false")
    property_code = Column(String(40))
    view_type = Column(String(60))
    agent = Column(JSONB)
    owner_id = Column(String(128))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Property(PropertyColumns, Base):
    __tablename__ = "properties"


class PendingProperty(PropertyColumns, Base):
    # Listings awaiting approval; fallback source for single-record lookups
    __tablename__ = "pending_properties"
