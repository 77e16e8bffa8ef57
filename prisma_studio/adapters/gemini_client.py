"""
PRISMA Studio Gemini Adapter
Thin wrapper around the google-genai SDK for text, image and speech calls.
"""

import base64
import binascii
import json
import random
import time
from typing import Any, Callable, Optional, Tuple, TypeVar

from google import genai
from google.genai import types

from prisma_studio.core.config import Settings, get_settings
from prisma_studio.core.credentials import ApiKeyConfig, CredentialEvent, get_api_key_config
from prisma_studio.core.errors import (
    AuthenticationError,
    RateLimitError,
    StudioException,
    ThirdPartyError,
    ValidationError,
)
from prisma_studio.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("429", "quota", "limit", "resource_exhausted")
_AUTH_MARKERS = ("401", "403", "api key not valid", "invalid api key", "api_key_invalid")


def _error_message(exc: Exception) -> str:
    """Best-effort provider message; SDK errors sometimes wrap a JSON body."""
    raw = getattr(exc, "message", None) or str(exc)
    raw = str(raw)
    if raw.startswith("{"):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return raw
        if isinstance(parsed, dict) and isinstance(parsed.get("error"), dict):
            return str(parsed["error"].get("message") or raw)
    return raw


def classify_api_error(exc: Exception, task: str) -> StudioException:
    """Map a provider exception to rate-limit, credential or generic failures."""
    message = _error_message(exc)
    code = getattr(exc, "code", None)
    status = str(getattr(exc, "status", "") or "")
    lowered = f"{code or ''} {status} {message}".lower()
    details = {"task": task, "error": message, "status_code": code}

    if code == 429 or any(marker in lowered for marker in _RATE_LIMIT_MARKERS):
        return RateLimitError(details=details)
    if code in (401, 403) or any(marker in lowered for marker in _AUTH_MARKERS):
        return AuthenticationError(details=details)
    return ThirdPartyError(
        message=f"Engine Failure [{task}]: {message or 'Unknown failure'}",
        details=details,
    )


def decode_data_url(value: str, default_mime_type: str = "image/png") -> Tuple[bytes, str]:
    """Split a data URL (or bare base64) into bytes and MIME type."""
    mime_type = default_mime_type
    payload = value
    if value.startswith("data:") and "," in value:
        header, payload = value.split(",", 1)
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(
            message="Image payload is not valid base64",
            details={"error": str(exc)}
        ) from exc


def _default_client_factory(api_key: str) -> Any:
    return genai.Client(api_key=api_key)


class GeminiClient:
    """Gemini adapter with bounded, jittered retries on quota errors."""

    def __init__(
        self,
        api_key_config: Optional[ApiKeyConfig] = None,
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.api_key_config = api_key_config or get_api_key_config()
        self._client_factory = client_factory or _default_client_factory
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._client: Any = None
        self.api_key_config.subscribe(self._on_credentials_event)

    def _on_credentials_event(self, event: CredentialEvent, config: ApiKeyConfig) -> None:
        if event in (CredentialEvent.CHANGED, CredentialEvent.CLEARED):
            self._client = None
            logger.info("gemini_client_reset", credential_event=event.value)

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory(self.api_key_config.require_key())
        return self._client

    def backoff_delay(self, attempt: int) -> float:
        """Exponential delay for the given zero-based attempt plus random jitter."""
        base = self.settings.backoff_base_seconds * (2 ** attempt)
        return base + self._rng.uniform(0, self.settings.backoff_jitter_seconds)

    def _call_with_retry(self, task: str, max_retries: int, call: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return call()
            except StudioException:
                raise
            except Exception as exc:
                error = classify_api_error(exc, task)
                if isinstance(error, RateLimitError) and attempt < max_retries:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        "gemini_rate_limited",
                        task=task,
                        attempt=attempt + 1,
                        max_retries=max_retries,
                        delay_seconds=round(delay, 2),
                    )
                    self._sleep(delay)
                    attempt += 1
                    continue
                if isinstance(error, AuthenticationError):
                    self.api_key_config.mark_invalid(error.details.get("error", "rejected"))
                logger.error(
                    "gemini_call_failed",
                    task=task,
                    code=error.code.value,
                    error=error.details.get("error"),
                    attempts=attempt + 1,
                )
                raise error from exc

    def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        model: Optional[str] = None,
        response_mime_type: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        image_bytes: Optional[bytes] = None,
        image_mime_type: str = "image/png",
        max_retries: int = 0,
        task: str = "generate_text",
    ) -> str:
        """Generate a text completion, optionally grounded on one image."""
        target_model = model or self.settings.text_model
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            response_mime_type=response_mime_type,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
        )
        if image_bytes is not None:
            contents: Any = [
                types.Part.from_bytes(data=image_bytes, mime_type=image_mime_type),
                types.Part.from_text(text=prompt),
            ]
        else:
            contents = prompt

        logger.debug(
            "gemini_text_request",
            task=task,
            model=target_model,
            instructions_present=bool(system_instruction),
            prompt_length=len(prompt),
            prompt_preview=prompt[:400],
        )

        response = self._call_with_retry(
            task,
            max_retries,
            lambda: self.client.models.generate_content(
                model=target_model,
                contents=contents,
                config=config,
            ),
        )
        content = (getattr(response, "text", None) or "").strip()

        logger.info(
            "gemini_text_success",
            task=task,
            model=target_model,
            prompt_length=len(prompt),
            response_length=len(content),
        )
        return content

    def generate_image(
        self,
        prompt: str,
        aspect_ratio: str,
        model: Optional[str] = None,
        reference_image: Optional[str] = None,
    ) -> str:
        """Render one image and return it as a data URL."""
        target_model = model or self.settings.image_model
        parts = []
        if reference_image:
            data, mime_type = decode_data_url(reference_image)
            parts.append(types.Part.from_bytes(data=data, mime_type=mime_type))
        parts.append(types.Part.from_text(text=prompt))
        config = types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
        )

        def call() -> str:
            response = self.client.models.generate_content(
                model=target_model,
                contents=parts,
                config=config,
            )
            inline = _first_inline_data(response)
            if inline is None:
                raise ThirdPartyError(
                    message="No image data returned from Engine.",
                    details={"task": "generate_image", "model": target_model}
                )
            encoded = base64.b64encode(inline.data).decode("ascii")
            return f"data:{inline.mime_type or 'image/png'};base64,{encoded}"

        data_url = self._call_with_retry("generate_image", self.settings.image_rate_limit_retries, call)
        logger.info(
            "gemini_image_success",
            model=target_model,
            aspect_ratio=aspect_ratio,
            with_reference=bool(reference_image),
        )
        return data_url

    def generate_speech(self, text: str, voice_id: str) -> bytes:
        """Synthesize speech; returns raw 16-bit mono PCM at 24 kHz."""
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_id)
                )
            ),
        )

        def call() -> bytes:
            response = self.client.models.generate_content(
                model=self.settings.speech_model,
                contents=text,
                config=config,
            )
            inline = _first_inline_data(response)
            if inline is None or not inline.data:
                raise ThirdPartyError(
                    message="Synthesis failed.",
                    details={"task": "generate_speech", "voice_id": voice_id}
                )
            return inline.data

        audio = self._call_with_retry("generate_speech", 0, call)
        logger.info("gemini_speech_success", voice_id=voice_id, audio_bytes=len(audio))
        return audio


def _first_inline_data(response: Any) -> Any:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            return inline
    return None


# Singleton instance
_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """Get Gemini client singleton."""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
