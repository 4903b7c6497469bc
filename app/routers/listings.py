from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from structlog import get_logger

from app.dependencies.auth import get_current_user
from app.dependencies.criteria import get_criteria
from app.dependencies.rate_limit import detail_limiter, listing_limiter, write_limiter
from app.exceptions import PropertyNotFoundError, RepositoryUnavailableError
from app.schemas.listing import FilterCriteria, ListingView
from app.schemas.property import PropertyFields, PropertyRecord
from app.services.listing import available_cities, compute_view
from app.services.repository import PropertyRepository, get_repository

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["properties"])

async def load_all(repository: PropertyRepository) -> List[PropertyRecord]:
    try:
        return await repository.fetch_all()
    except RepositoryUnavailableError as e:
        logger.error("Property fetch failed", error=e.message)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

@router.get("/properties", response_model=ListingView, dependencies=[Depends(listing_limiter)])
async def list_properties(
    criteria: FilterCriteria = Depends(get_criteria),
    repository: PropertyRepository = Depends(get_repository),
):
    records = await load_all(repository)
    view = compute_view(records, criteria)
    logger.info(
        "Listing view served",
        criteria=criteria.model_dump(mode="json"),
        total_count=view.total_count,
        page=view.page,
    )
    return view

@router.get("/properties/featured", response_model=List[PropertyRecord], dependencies=[Depends(listing_limiter)])
async def list_featured(repository: PropertyRepository = Depends(get_repository)):
    try:
        return await repository.fetch_featured()
    except RepositoryUnavailableError as e:
        logger.error("Featured fetch failed", error=e.message)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

@router.get("/properties/cities", response_model=List[str], dependencies=[Depends(listing_limiter)])
async def list_cities(repository: PropertyRepository = Depends(get_repository)):
    """Location selector options, taken from the unfiltered collection."""
    return available_cities(await load_all(repository))

@router.get("/properties/{property_id}", response_model=PropertyRecord, dependencies=[Depends(detail_limiter)])
async def get_property(property_id: str, repository: PropertyRepository = Depends(get_repository)):
    try:
        return await repository.get_by_id(property_id)
    except PropertyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found or has been deleted")
    except RepositoryUnavailableError as e:
        logger.error("Get property failed", property_id=property_id, error=e.message)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

def _require_role(user: dict, *roles: str) -> None:
    if (user.get("role") or "").lower() not in roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to manage listings")

@router.post(
    "/properties/pending",
    response_model=PropertyRecord,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(write_limiter)],
)
async def submit_property(
    submission: PropertyFields,
    user: dict = Depends(get_current_user),
    repository: PropertyRepository = Depends(get_repository),
):
    """Homeowner submission; stays out of the listing view until an admin approves it."""
    _require_role(user, "homeowner", "admin")
    owner_id = user.get("id") or user.get("uid")
    try:
        record = await repository.submit_property(submission, owner_id=str(owner_id) if owner_id else None)
    except RepositoryUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    logger.info("Property submitted for approval", property_id=record.id, owner_id=record.owner_id)
    return record

@router.post("/properties/{property_id}/approve", response_model=PropertyRecord, dependencies=[Depends(write_limiter)])
async def approve_property(
    property_id: str,
    user: dict = Depends(get_current_user),
    repository: PropertyRepository = Depends(get_repository),
):
    _require_role(user, "admin")
    try:
        return await repository.approve_property(property_id)
    except PropertyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pending property not found")
    except RepositoryUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

@router.delete(
    "/properties/pending/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(write_limiter)],
)
async def reject_property(
    property_id: str,
    user: dict = Depends(get_current_user),
    repository: PropertyRepository = Depends(get_repository),
):
    _require_role(user, "admin")
    try:
        await repository.reject_property(property_id)
    except PropertyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pending property not found")
    except RepositoryUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete(
    "/properties/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(write_limiter)],
)
async def delete_property(
    property_id: str,
    user: dict = Depends(get_current_user),
    repository: PropertyRepository = Depends(get_repository),
):
    """Admins may delete any listing; homeowners only their own."""
    _require_role(user, "homeowner", "admin")
    user_id = user.get("id") or user.get("uid")
    try:
        record = await repository.get_by_id(property_id)
        if user.get("role").lower() != "admin" and (user_id is None or record.owner_id != str(user_id)):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner can delete this listing")
        await repository.delete_property(property_id)
    except PropertyNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found or has been deleted")
    except RepositoryUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    logger.info("Property removed", property_id=property_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
