"""Bearer key authentication for the bridge API."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from spotify_bridge.config import Settings, get_settings
from spotify_bridge.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> None:
    """Verify API key from Authorization header.

    Args:
        request: The FastAPI request object
        credentials: HTTP Bearer credentials from header
        settings: Settings instance with API key from .env

    Raises:
        HTTPException: If API key is missing or invalid

    Note:
        The check is skipped when BRIDGE_API_KEY is empty, which is the
        default for a bridge bound to localhost.

    Example:
        Authorization: Bearer your-api-key-here
    """
    api_key = settings.bridge_api_key
    if not api_key:
        return

    if not credentials:
        log_with_context(
            logger,
            "warning",
            "Missing API key",
            event_type="auth_failure",
            path=str(request.url),
            ip=request.client.host if request.client else "unknown",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if credentials.credentials != api_key:
        log_with_context(
            logger,
            "warning",
            "Invalid API key",
            event_type="auth_failure",
            path=str(request.url),
            ip=request.client.host if request.client else "unknown",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_trusted_hosts(settings: Settings) -> list[str]:
    """Get trusted host patterns from settings.

    Args:
        settings: Settings instance with trusted hosts configuration

    Returns:
        List of trusted host patterns
    """
    return [host.strip() for host in settings.trusted_hosts.split(",") if host.strip()]
