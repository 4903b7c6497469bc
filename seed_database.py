#!/usr/bin/env python3
"""
Script to add sample Philippine listings for local testing.
Only seeds when the properties table is empty.
"""
import asyncio
import time
import uuid

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.config import settings
from app.schemas.property import PropertyRecord
from app.services.repository import PropertyRepository

def _listing(code, title, location, city, neighborhood, zip_code, price, type, bedrooms, bathrooms, area,
             year_built, parking, view, featured, lat, lng, tags, agent, description):
    return {
        "propertyId": code,
        "title": title,
        "location": location,
        "city": city,
        "neighborhood": neighborhood,
        "zipCode": zip_code,
        "price": price,
        "type": type,
        "status": "For Sale",
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "area": area,
        "yearBuilt": year_built,
        "parkingSpaces": parking,
        "viewType": view,
        "isFeatured": featured,
        "coordinates": {"lat": lat, "lng": lng},
        "tags": tags,
        "agent": {"name": agent[0], "email": agent[1], "phone": agent[2]},
        "description": description,
    }

SAMPLE_PROPERTIES = [
    _listing("HWH-PH-1001", "Modern Condo in Makati", "Ayala Avenue, Makati City, Metro Manila, Philippines",
             "Makati", "Ayala Center", "1200", 12500000, "Condominium", 2, 2, 120, 2019, 1, "City View", True,
             14.5547, 121.0244, ["Featured", "Premium"],
             ("Maria Santos", "maria@homewildhunt.com", "(+63) 917-123-4567"),
             "Condominium unit in the heart of Makati CBD, walking distance to malls and offices."),
    _listing("HWH-PH-1002", "Beachfront Villa in Cebu", "Mactan Island, Lapu-Lapu City, Cebu, Philippines",
             "Cebu", "Mactan Island", "6015", 35000000, "Villa", 4, 5, 350, 2021, 3, "Ocean View", True,
             10.3157, 123.9777, ["Premium", "Beachfront"],
             ("Carlos Reyes", "carlos@homewildhunt.com", "(+63) 918-765-4321"),
             "Villa with private beach access, infinity pool and open-plan living."),
    _listing("HWH-PH-1003", "Heritage House in Vigan", "Calle Crisologo, Vigan City, Ilocos Sur, Philippines",
             "Vigan", "Heritage Zone", "2700", 18000000, "Single Family", 5, 3, 280, 1870, 1, "Street View", True,
             17.5747, 120.3871, ["Historical", "Ancestral"],
             ("Luis Navarro", "luis@homewildhunt.com", "(+63) 919-876-5432"),
             "Restored Spanish-colonial ancestral house on the cobblestone street of Calle Crisologo."),
    _listing("HWH-PH-1004", "Modern Bungalow in Tagaytay", "Tagaytay City, Cavite, Philippines",
             "Tagaytay", "Highlands", "4120", 9500000, "Single Family", 3, 2, 200, 2018, 2, "Lake View", False,
             14.1153, 120.9380, ["Mountain View"],
             ("Ana Gomez", "ana@homewildhunt.com", "(+63) 917-234-5678"),
             "Bungalow with a view of Taal Lake and a cool highland climate all year."),
    _listing("HWH-PH-1005", "Luxury Townhouse in BGC", "Bonifacio Global City, Taguig, Metro Manila, Philippines",
             "Taguig", "Bonifacio Global City", "1634", 25000000, "Townhouse", 3, 4, 220, 2020, 2, "City View", True,
             14.5508, 121.0529, ["Luxury", "Premium"],
             ("Marco Torres", "marco@homewildhunt.com", "(+63) 918-345-6789"),
             "Three-storey townhouse in a gated BGC enclave with a roof deck."),
    _listing("HWH-PH-1006", "Oceanfront Lot in Batangas", "Nasugbu, Batangas, Philippines",
             "Batangas", "Nasugbu", "4231", 15000000, "Land", 0, 0, 1000, 0, 0, "Ocean View", False,
             14.0760, 120.6310, ["Beachfront", "Investment"],
             ("Elena Cruz", "elena@homewildhunt.com", "(+63) 917-456-7890"),
             "Titled beachfront lot suitable for a resort or vacation home."),
]

async def seed_database():
    engine = create_async_engine(settings.DATABASE_URL)
    redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    repository = PropertyRepository(async_sessionmaker(engine, expire_on_commit=False), redis)

    await repository.invalidate_cache()
    if await repository.fetch_all():
        print("✓ Database already contains properties. No sample data was added.")
    else:
        now = int(time.time() * 1000)
        for data in SAMPLE_PROPERTIES:
            record = PropertyRecord.model_validate({"id": uuid.uuid4().hex, "createdAt": now, **data})
            await repository.save_property(record)
        print(f"✓ Added {len(SAMPLE_PROPERTIES)} sample properties")

    await redis.close()
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(seed_database())
