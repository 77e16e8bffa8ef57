"""Shared fixtures for PRISMA Studio tests."""

from typing import Any, Dict, List, Optional

import pytest

from prisma_studio.features.production.schemas import GenerationRequest


class FakeLLM:
    """Stands in for GeminiClient; replays queued text responses."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.speech_calls: List[Dict[str, Any]] = []
        self.image_calls: List[Dict[str, Any]] = []

    def generate_text(self, prompt: str, **kwargs: Any) -> str:
        self.calls.append({"prompt": prompt, **kwargs})
        if not self.responses:
            raise AssertionError("FakeLLM ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def generate_speech(self, text: str, voice_id: str) -> bytes:
        self.speech_calls.append({"text": text, "voice_id": voice_id})
        return b"\x00\x01" * 8

    def generate_image(self, prompt: str, aspect_ratio: str, model=None, reference_image=None) -> str:
        self.image_calls.append({"prompt": prompt, "aspect_ratio": aspect_ratio, "model": model})
        return "data:image/png;base64,AAAA"


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def generation_request():
    return GenerationRequest(
        script="A lighthouse keeper finds a message in a bottle on a stormy night.",
        visual_style="Cyberpunk",
        scene_density="Standard",
        aspect_ratio="16:9",
        video_duration="1 Minute",
    )


@pytest.fixture
def make_llm():
    """Factory for FakeLLM instances primed with responses."""
    return FakeLLM
