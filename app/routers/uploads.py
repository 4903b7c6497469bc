from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse
from structlog import get_logger

from app.dependencies.rate_limit import upload_limiter
from app.exceptions import UploadRejectedError
from app.services.uploads import store_images

logger = get_logger()
router = APIRouter(prefix="/api", tags=["uploads"])

@router.post("/upload-images", dependencies=[Depends(upload_limiter)])
async def upload_images(images: Optional[List[UploadFile]] = File(None)):
    try:
        paths = await store_images(images or [])
    except UploadRejectedError as e:
        logger.warning("Upload rejected", reason=e.message, filename=e.filename)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "message": e.message})
    except OSError as e:
        logger.error("Error uploading files", error=str(e), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Error uploading files", "error": str(e)},
        )
    return {
        "success": True,
        "message": f"{len(paths)} file(s) uploaded successfully",
        "paths": paths,
    }
