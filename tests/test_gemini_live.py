"""
Live smoke tests against the Gemini API.
Run with: GEMINI_API_KEY=... pytest -m integration
"""

import os

import pytest

from prisma_studio.adapters.gemini_client import GeminiClient
from prisma_studio.adapters.key_validation import validate_api_key
from prisma_studio.core.credentials import ApiKeyConfig
from prisma_studio.features.production.agents import generate_movie_package
from prisma_studio.features.production.schemas import GenerationRequest

API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not API_KEY, reason="GEMINI_API_KEY not set"),
]


def test_key_validates():
    assert validate_api_key(API_KEY).valid


def test_short_package_round_trip():
    llm = GeminiClient(api_key_config=ApiKeyConfig(API_KEY))
    request = GenerationRequest(
        script="A paper boat drifts down a rainy city gutter and reaches the sea.",
        visual_style="Studio Ghibli",
        scene_density="Concise",
        video_duration="30 Seconds",
    )

    package = generate_movie_package(request, llm=llm)

    assert 0 < len(package.visual_prompts) <= 4
    assert package.metadata.aspect_ratio == "16:9"
