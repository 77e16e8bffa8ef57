"""
PRISMA Studio Settings Handlers
API key management routes backed by the explicit ApiKeyConfig.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from prisma_studio.adapters.key_validation import validate_api_key
from prisma_studio.core.credentials import ApiKeyConfig, get_api_key_config
from prisma_studio.core.errors import SuccessResponse, ValidationError
from prisma_studio.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class ApiKeyRequest(BaseModel):
    """Request carrying a candidate API key."""
    api_key: str = Field(..., min_length=1, description="Gemini API key")


def _status(config: ApiKeyConfig) -> dict:
    return {
        "configured": config.is_configured,
        "key_suffix": config.api_key[-4:] if config.api_key else None,
        "last_invalid_reason": config.last_invalid_reason,
    }


@router.get("/api-key", response_model=SuccessResponse)
def api_key_status(config: ApiKeyConfig = Depends(get_api_key_config)):
    return SuccessResponse(data=_status(config))


@router.post("/api-key/validate", response_model=SuccessResponse)
def validate_api_key_endpoint(request: ApiKeyRequest):
    """Probe a key without storing it."""
    result = validate_api_key(request.api_key)
    return SuccessResponse(data=result.model_dump())


@router.put("/api-key", response_model=SuccessResponse)
def set_api_key(
    request: ApiKeyRequest,
    config: ApiKeyConfig = Depends(get_api_key_config),
):
    """Validate, then store the key; subscribers reset their SDK clients."""
    result = validate_api_key(request.api_key)
    if not result.valid:
        raise ValidationError(
            message=result.message or "API key rejected",
            details={"stored": False}
        )
    config.set(request.api_key)
    return SuccessResponse(data=_status(config))


@router.delete("/api-key", response_model=SuccessResponse)
def clear_api_key(config: ApiKeyConfig = Depends(get_api_key_config)):
    config.clear()
    return SuccessResponse(data=_status(config))
