from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import declarative_base

# One Base for the live and pending listing tables
Base = declarative_base(cls=AsyncAttrs)

# Imported after Base so both tables register on Base.metadata
from . import property
