"""
PRISMA Studio API Key Validation
Format check plus a live probe of the Gemini models endpoint.
"""

import re
from typing import Optional

import httpx
from pydantic import BaseModel

from prisma_studio.core.config import get_settings
from prisma_studio.core.logging import get_logger

logger = get_logger(__name__)

GEMINI_KEY_PATTERN = re.compile(r"^AIza[0-9A-Za-z\-_]+$")
MIN_KEY_LENGTH = 20


class KeyValidationResult(BaseModel):
    valid: bool
    message: Optional[str] = None


def validate_api_key(api_key: str, http_client: Optional[httpx.Client] = None) -> KeyValidationResult:
    """
    Validate a Gemini API key.

    Runs cheap format checks first and only then lists models with the key;
    never raises, the outcome is always reported in the result.
    """
    key = (api_key or "").strip()

    if len(key) < MIN_KEY_LENGTH:
        return KeyValidationResult(valid=False, message="Key is too short to be a valid Gemini API key.")

    if not GEMINI_KEY_PATTERN.match(key):
        return KeyValidationResult(valid=False, message="Invalid format. Gemini keys usually start with 'AIza'.")

    settings = get_settings()
    client = http_client or httpx.Client(timeout=httpx.Timeout(10.0))
    try:
        response = client.get(
            settings.key_validation_url,
            params={"key": key},
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as exc:
        logger.error("api_key_probe_network_error", error=str(exc))
        return KeyValidationResult(
            valid=False,
            message="Network connection failure. Please check your internet or firewall settings."
        )
    finally:
        if http_client is None:
            client.close()

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    if response.status_code >= 400:
        error = data.get("error") if isinstance(data.get("error"), dict) else {}
        status = error.get("code") or response.status_code
        message = str(error.get("message") or "").lower()

        logger.warning("api_key_probe_failed", status=status, message=message)

        if status == 429 or "quota" in message or "limit" in message:
            return KeyValidationResult(
                valid=False,
                message="Key verified, but QUOTA EXCEEDED. Please check your billing/usage limits at ai.google.dev."
            )
        if status in (400, 401, 403) or "not valid" in message or "invalid" in message:
            return KeyValidationResult(
                valid=False,
                message="The API key provided is not valid. Please generate a new key at Google AI Studio."
            )
        return KeyValidationResult(
            valid=False,
            message=f"Validation Error: {error.get('message') or 'Verification failed'}"
        )

    if isinstance(data.get("models"), list):
        logger.info("api_key_probe_success", model_count=len(data["models"]))
        return KeyValidationResult(valid=True)

    return KeyValidationResult(
        valid=False,
        message="Validation returned an empty response. Please check your Google AI Studio configuration."
    )
