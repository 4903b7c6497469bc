import asyncio
import json
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from structlog import get_logger

from app.config import settings
from app.exceptions import PropertyNotFoundError, RepositoryUnavailableError
from app.models.property import PendingProperty, Property
from app.schemas.property import PropertyFields, PropertyRecord
from app.utils.retry import retry

logger = get_logger()

ALL_PROPERTIES_CACHE_KEY = "properties:all"

# Called with (record, None) on every change, (None, None) when the record is gone,
# and (None, error) when the repository could not be read.
RecordCallback = Callable[[Optional[PropertyRecord], Optional[Exception]], None]
Unsubscribe = Callable[[], None]

_TRANSIENT_ERRORS = (SQLAlchemyError, OSError)
_COLUMNS = [c.name for c in Property.__table__.columns if c.name != "updated_at"]


def row_to_record(row) -> PropertyRecord:
    data = {name: getattr(row, name) for name in _COLUMNS}
    lat, lng = data.pop("lat"), data.pop("lng")
    data["coordinates"] = {"lat": lat, "lng": lng} if lat is not None and lng is not None else None
    return PropertyRecord.model_validate(data)


def record_to_columns(record: PropertyRecord) -> dict:
    columns = record.model_dump(mode="json", exclude={"coordinates", "created_at"})
    columns["lat"] = record.coordinates.lat if record.coordinates else None
    columns["lng"] = record.coordinates.lng if record.coordinates else None
    if record.created_at is not None:
        columns["created_at"] = datetime.fromtimestamp(record.created_at_millis / 1000, tz=timezone.utc)
    return columns


class PropertyRepository:
    """Access to the listing collections plus single-record subscriptions.

    `properties` holds live listings; `pending_properties` holds listings
    awaiting approval and is only consulted as a fallback for lookups by id.
    """

    def __init__(self, session_factory: async_sessionmaker, redis: Optional[Redis] = None):
        self._session_factory = session_factory
        self._redis = redis
        self._subscribers: Dict[str, Dict[object, RecordCallback]] = {}
        self._tasks = set()

    # Reads

    @retry(tries=3, delay=0.5, backoff=2, retry_on=_TRANSIENT_ERRORS)
    async def _query_all(self) -> List[PropertyRecord]:
        async with self._session_factory() as db:
            result = await db.execute(select(Property).order_by(Property.created_at))
            rows = result.scalars().all()
        records = []
        for row in rows:
            try:
                records.append(row_to_record(row))
            except ValidationError as e:
                logger.warning("Skipping malformed property row", property_id=row.id, error=str(e))
        return records

    @retry(tries=3, delay=0.5, backoff=2, retry_on=_TRANSIENT_ERRORS)
    async def _query_one(self, property_id: str) -> Optional[PropertyRecord]:
        async with self._session_factory() as db:
            for model in (Property, PendingProperty):
                row = await db.get(model, property_id)
                if row is not None:
                    logger.info("Property found", property_id=property_id, table=model.__tablename__)
                    return row_to_record(row)
        return None

    @retry(tries=3, delay=0.5, backoff=2, retry_on=_TRANSIENT_ERRORS)
    async def _query_pending(self, property_id: str) -> Optional[PropertyRecord]:
        async with self._session_factory() as db:
            row = await db.get(PendingProperty, property_id)
        return row_to_record(row) if row is not None else None

    async def fetch_all(self) -> List[PropertyRecord]:
        cached = await self._cache_get(ALL_PROPERTIES_CACHE_KEY)
        if cached is not None:
            logger.info("All properties cache hit")
            try:
                return [PropertyRecord.model_validate(item) for item in json.loads(cached)]
            except (ValueError, ValidationError):
                logger.warning("Cache parse failed; rebuilding", cache_key=ALL_PROPERTIES_CACHE_KEY)

        logger.info("All properties cache miss")
        try:
            records = await self._query_all()
        except _TRANSIENT_ERRORS as e:
            logger.error("Fetching properties failed", error=str(e))
            raise RepositoryUnavailableError("Failed to load properties. Please try again later.") from e

        payload = json.dumps([r.model_dump(mode="json", by_alias=True) for r in records])
        await self._cache_set(ALL_PROPERTIES_CACHE_KEY, payload)
        return records

    async def fetch_featured(self) -> List[PropertyRecord]:
        return [r for r in await self.fetch_all() if r.is_featured]

    async def find_by_id(self, property_id: str) -> Optional[PropertyRecord]:
        try:
            return await self._query_one(property_id)
        except _TRANSIENT_ERRORS as e:
            logger.error("Fetching property failed", property_id=property_id, error=str(e))
            raise RepositoryUnavailableError("Failed to load property details. Please try again later.") from e

    async def get_by_id(self, property_id: str) -> PropertyRecord:
        record = await self.find_by_id(property_id)
        if record is None:
            logger.info("Property not found in any collection", property_id=property_id)
            raise PropertyNotFoundError(property_id)
        return record

    # Writes

    async def save_property(self, record: PropertyRecord, pending: bool = False) -> None:
        """Insert or replace a listing. A listing lives in exactly one of the two tables."""
        target, other = (PendingProperty, Property) if pending else (Property, PendingProperty)
        try:
            async with self._session_factory() as db:
                await db.merge(target(**record_to_columns(record)))
                await db.execute(delete(other).where(other.id == record.id))
                await db.commit()
        except _TRANSIENT_ERRORS as e:
            logger.error("Saving property failed", property_id=record.id, error=str(e))
            raise RepositoryUnavailableError("Failed to save property") from e
        logger.info("Property saved", property_id=record.id, table=target.__tablename__)
        await self.invalidate_cache()
        await self._notify(record.id)

    async def delete_property(self, property_id: str) -> None:
        try:
            async with self._session_factory() as db:
                for model in (Property, PendingProperty):
                    await db.execute(delete(model).where(model.id == property_id))
                await db.commit()
        except _TRANSIENT_ERRORS as e:
            logger.error("Deleting property failed", property_id=property_id, error=str(e))
            raise RepositoryUnavailableError("Failed to delete property") from e
        logger.info("Property deleted", property_id=property_id)
        await self.invalidate_cache()
        await self._notify(property_id)

    # Listing workflow: submissions wait in the pending table until approved

    async def submit_property(self, fields: PropertyFields, owner_id: Optional[str] = None) -> PropertyRecord:
        data = fields.model_dump()
        data["id"] = uuid.uuid4().hex
        data["created_at"] = datetime.now(timezone.utc).isoformat()
        if owner_id is not None:
            data["owner_id"] = owner_id
        record = PropertyRecord.model_validate(data)
        await self.save_property(record, pending=True)
        return record

    async def get_pending(self, property_id: str) -> PropertyRecord:
        try:
            record = await self._query_pending(property_id)
        except _TRANSIENT_ERRORS as e:
            logger.error("Fetching pending property failed", property_id=property_id, error=str(e))
            raise RepositoryUnavailableError("Failed to load property details. Please try again later.") from e
        if record is None:
            raise PropertyNotFoundError(property_id)
        return record

    async def approve_property(self, property_id: str) -> PropertyRecord:
        """Publish a pending listing under the same id."""
        record = await self.get_pending(property_id)
        await self.save_property(record, pending=False)
        logger.info("Property approved", property_id=property_id)
        return record

    async def reject_property(self, property_id: str) -> None:
        await self.get_pending(property_id)
        await self.delete_property(property_id)
        logger.info("Property rejected", property_id=property_id)

    # Subscriptions

    def subscribe(self, property_id: str, callback: RecordCallback) -> Unsubscribe:
        """Watch one record. The callback receives the current value right away and again on every change.

        Must be called from inside the event loop. The returned handle is idempotent.
        """
        token = object()
        self._subscribers.setdefault(property_id, {})[token] = callback
        task = asyncio.get_running_loop().create_task(self._deliver(property_id, [token]))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        def unsubscribe() -> None:
            watchers = self._subscribers.get(property_id)
            if watchers is None:
                return
            watchers.pop(token, None)
            if not watchers:
                del self._subscribers[property_id]

        return unsubscribe

    def subscriber_count(self, property_id: str) -> int:
        return len(self._subscribers.get(property_id, {}))

    async def _notify(self, property_id: str) -> None:
        tokens = list(self._subscribers.get(property_id, {}))
        if tokens:
            await self._deliver(property_id, tokens)

    async def _deliver(self, property_id: str, tokens: List[object]) -> None:
        try:
            record, error = await self.find_by_id(property_id), None
        except RepositoryUnavailableError as e:
            record, error = None, e
        for token in tokens:
            # Skip watchers that unsubscribed while the lookup was in flight
            callback = self._subscribers.get(property_id, {}).get(token)
            if callback is not None:
                callback(record, error)

    # Cache

    async def _cache_get(self, key: str) -> Optional[str]:
        if self._redis is None:
            return None
        try:
            return await self._redis.get(key)
        except RedisError as e:
            logger.warning("Cache read failed", cache_key=key, error=str(e))
            return None

    async def _cache_set(self, key: str, value: str) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.setex(key, settings.CACHE_TTL_SECONDS, value)
        except RedisError as e:
            logger.warning("Cache write failed", cache_key=key, error=str(e))

    async def invalidate_cache(self) -> int:
        if self._redis is None:
            return 0
        try:
            return await self._redis.delete(ALL_PROPERTIES_CACHE_KEY)
        except RedisError as e:
            logger.warning("Cache invalidation failed", error=str(e))
            return 0


_repository: Optional[PropertyRepository] = None


def get_repository() -> PropertyRepository:
    global _repository
    if _repository is None:
        engine = create_async_engine(settings.DATABASE_URL)
        redis = Redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
        _repository = PropertyRepository(async_sessionmaker(engine, expire_on_commit=False), redis)
    return _repository
