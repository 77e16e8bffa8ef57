"""PRISMA Studio Adapters Module"""

from .gemini_client import get_gemini_client  # noqa: F401
from .key_validation import validate_api_key  # noqa: F401
