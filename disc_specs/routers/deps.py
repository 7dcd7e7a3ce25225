from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from disc_specs.core.config import settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(
    api_key: str | None = Security(api_key_header),
):
    """Require X-API-Key header when API_KEY is configured."""
    if not settings.API_KEY:
        return  # auth disabled
    if api_key != settings.API_KEY:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")
