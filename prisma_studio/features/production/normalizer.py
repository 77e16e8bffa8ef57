"""
PRISMA Studio Package Normalizer
Fills every ProductionPackage field from a parsed (possibly partial) model reply.
"""

from typing import Any, Dict, List, Optional

from prisma_studio.core.logging import get_logger
from prisma_studio.features.production.keyframes import required_keyframe_count
from prisma_studio.features.production.schemas import (
    GenerationRequest,
    PackageMetadata,
    ProductionPackage,
    SeoMetadata,
    SfxCues,
    StylePreset,
    VisualPrompt,
)


__all__ = ["normalize", "coerce_visual_prompts", "coerce_visual_prompt"]


DEFAULT_TITLE = "Untitled"
DEFAULT_MOOD = "Cinematic"
TOPIC_FALLBACK_CHARS = 30

logger = get_logger(__name__)


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _optional_text(value: Any) -> Optional[str]:
    return _text(value) or None


def _joined(value: Any, separator: str) -> str:
    """Accept a string or a list of strings (models sometimes emit tag arrays)."""
    if isinstance(value, list):
        return separator.join(item.strip() for item in value if isinstance(item, str) and item.strip())
    return _text(value)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _sfx(value: Any) -> Optional[SfxCues]:
    data = _mapping(value)
    if not data:
        return None
    return SfxCues(
        primary=_text(data.get("primary"), "Ambient soundscape"),
        secondary=_text(data.get("secondary"), "Atmospheric"),
        one_shot=_optional_text(data.get("oneShot", data.get("one_shot"))),
        avoid=_optional_text(data.get("avoid")),
    )


def _prompt_type(raw_type: Any, requires_character: Optional[bool], prompt: str) -> str:
    if raw_type in ("character", "scene"):
        return raw_type
    if requires_character is not None:
        return "character" if requires_character else "scene"
    return "character" if prompt.startswith("[CST]") else "scene"


def coerce_visual_prompt(item: Any, index: int) -> Optional[VisualPrompt]:
    """Build a VisualPrompt from one raw entry; None when the entry is unusable."""
    if isinstance(item, str) and item.strip():
        item = {"prompt": item}
    if not isinstance(item, dict):
        return None

    prompt = _text(item.get("prompt"))
    requires_character = item.get("requiresCharacter", item.get("requires_character"))
    if not isinstance(requires_character, bool):
        requires_character = None

    return VisualPrompt(
        label=_text(item.get("label"), f"Scene {index + 1}"),
        type=_prompt_type(item.get("type"), requires_character, prompt),
        prompt=prompt,
        video_prompt=_optional_text(item.get("videoPrompt", item.get("video_prompt"))),
        requires_character=requires_character,
        mood_guide=_optional_text(item.get("moodGuide", item.get("mood_guide"))),
        visual_description=_optional_text(item.get("visualDescription", item.get("visual_description"))),
        camera_angle=_optional_text(item.get("cameraAngle", item.get("camera_angle"))),
        audio_atmosphere=_optional_text(item.get("audioAtmosphere", item.get("audio_atmosphere"))),
        audio_cue=_optional_text(item.get("audioCue", item.get("audio_cue"))),
        dialogue=_optional_text(item.get("dialogue")),
        estimated_duration=_number(item.get("estimatedDuration", item.get("estimated_duration"))),
        sfx_cues=_sfx(item.get("sfx_cues", item.get("sfxCues"))),
    )


def coerce_visual_prompts(items: Any) -> List[VisualPrompt]:
    if not isinstance(items, list):
        return []
    coerced = []
    for index, item in enumerate(items):
        prompt = coerce_visual_prompt(item, index)
        if prompt is not None:
            coerced.append(prompt)
    return coerced


def _seo(value: Any) -> SeoMetadata:
    data = _mapping(value)
    return SeoMetadata(
        best_title=_text(data.get("bestTitle", data.get("best_title")), DEFAULT_TITLE),
        alt_titles=_string_list(data.get("altTitles", data.get("alt_titles"))),
        video_description=_text(data.get("videoDescription", data.get("video_description"))),
        tags=_joined(data.get("tags"), ", "),
        hashtags=_joined(data.get("hashtags"), " "),
        thumbnail_prompt=_text(data.get("thumbnailPrompt", data.get("thumbnail_prompt"))),
        suno_prompt=_text(data.get("sunoPrompt", data.get("suno_prompt"))),
    )


def normalize(
    parsed: Any,
    request: GenerationRequest,
    style_preset: StylePreset,
) -> ProductionPackage:
    """
    Build a complete ProductionPackage from whatever the model returned.

    Over-long scene lists are cut to the keyframe budget; short ones are kept
    as they are.
    """
    data = _mapping(parsed)
    keyframe_total = required_keyframe_count(request.video_duration, request.scene_density)

    raw_prompts = data.get("visualPrompts", data.get("visual_prompts"))
    raw_prompts = raw_prompts[:keyframe_total] if isinstance(raw_prompts, list) else []
    visual_prompts = coerce_visual_prompts(raw_prompts)

    if len(visual_prompts) < keyframe_total:
        logger.warning(
            "package_scene_shortfall",
            expected=keyframe_total,
            received=len(visual_prompts),
        )

    metadata = _mapping(data.get("metadata"))
    titles = _string_list(data.get("keyframe_plan_titles")) or [prompt.label for prompt in visual_prompts]

    return ProductionPackage(
        metadata=PackageMetadata(
            topic=_text(metadata.get("topic"), request.script[:TOPIC_FALLBACK_CHARS]),
            mood=_text(metadata.get("mood"), DEFAULT_MOOD),
            visual_style=request.visual_style,
            aspect_ratio=request.aspect_ratio,
            duration=request.video_duration,
        ),
        seo=_seo(data.get("seo")),
        titles=titles,
        story=_text(data.get("story"), request.script),
        audio_map=[],
        visual_prompts=visual_prompts,
        cst="",
        bst="",
        gst="",
        vst=style_preset.recommended_vst,
    )
