from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import httpx
from app.config import settings
from structlog import get_logger

logger = get_logger()
security = HTTPBearer()

async def get_current_user(credentials: HTTPAuthorizationCredentials = Security(security)) -> dict:
    """Delegate token verification to the user management service."""
    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            response = await client.get(
                f"{settings.USER_MANAGEMENT_URL}/auth/verify",
                headers={"Authorization": f"Bearer {credentials.credentials}"}
            )
            response.raise_for_status()
            user_data = response.json()
            logger.info("User verified", user_id=user_data.get("id") or user_data.get("uid"))
            return user_data
        except httpx.HTTPStatusError as e:
            logger.error("Token verification failed", status_code=e.response.status_code, response=e.response.text)
            raise HTTPException(status_code=401, detail="Invalid token")
        except httpx.RequestError as e:
            logger.error("User management service is unavailable", error=str(e))
            raise HTTPException(status_code=503, detail="User management service is unavailable")

async def get_current_user_id(user: dict = Depends(get_current_user)) -> str:
    user_id = user.get("id") or user.get("uid")
    if user_id is None:
        logger.warning("Verified user has no id", user=user)
        raise HTTPException(status_code=401, detail="Invalid token")
    return str(user_id)
