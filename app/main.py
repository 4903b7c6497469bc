from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.routers import favorites, health, listings, maps, uploads
from app.core.logging import setup_logging
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from app.config import settings

app = FastAPI(title="Property Listings Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(listings.router)
app.include_router(maps.router)
app.include_router(favorites.router)
app.include_router(uploads.router)
app.include_router(health.router)
# Uploaded images are served back under the paths the relay returns
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="images")

@app.on_event("startup")
async def startup_event():
    setup_logging()
    redis = await Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    await FastAPILimiter.init(redis)

@app.on_event("shutdown")
async def shutdown_event():
    await FastAPILimiter.close()
