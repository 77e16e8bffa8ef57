"""Production prompt templates.
Renders the package instruction and helper prompts from YAML definitions.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from prisma_studio.features.production.schemas import (
    ContinuityTokens,
    StylePreset,
    ViralScriptConfig,
)
from prisma_studio.features.production.styles import resolve_style

PROMPT_DATA_DIR = Path(__file__).resolve().parent / "prompt_data"

NEGATIVE_SUFFIX = (
    "--no text, watermark, logo, signature, bad anatomy, deformed, blurry, low quality, ugly, "
    "distorted face, extra fingers, uneven borders, random text, circle around number"
)

DEFAULT_SCRIPT_CHARS = 1500


@lru_cache(maxsize=None)
def _load_prompt(name: str) -> dict:
    """Load a YAML prompt definition from disk and cache the result."""
    prompt_path = PROMPT_DATA_DIR / f"{name}.yaml"
    with prompt_path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp)


def _join_sections(*sections: Optional[str]) -> str:
    return "\n\n".join(section.strip() for section in sections if section).strip()


def _render(name: str, section: str, **format_kwargs: Any) -> str:
    return _load_prompt(name).get(section, "").format(**format_kwargs).strip()


def build_package_system_prompt(
    style_name: str,
    aspect_ratio: str,
    keyframe_count: int,
    density_label: str,
    duration_label: str = "",
    character_description: str = "",
    style_preset: Optional[StylePreset] = None,
) -> str:
    """Render the system instruction for a production package."""
    data = _load_prompt("package")
    preset = style_preset or resolve_style(style_name)
    format_kwargs = {
        "keyframe_total": keyframe_count,
        "image_style": preset.image_style,
        "video_style": preset.video_style,
        "aspect_ratio": aspect_ratio,
        "negative_suffix": NEGATIVE_SUFFIX,
        "density": density_label,
        "duration": duration_label,
        "style_name": style_name,
        "character_description": character_description.strip(),
    }

    character_section: Optional[str] = None
    if character_description.strip():
        character_section = data.get("character_notes", "").format(**format_kwargs)

    return _join_sections(
        data.get("core", "").format(**format_kwargs),
        data.get("mode_a", "").format(**format_kwargs),
        data.get("mode_b", "").format(**format_kwargs),
        data.get("video_motion", "").format(**format_kwargs),
        character_section,
        data.get("output_contract", "").format(**format_kwargs),
        data.get("json_schema", "").format(**format_kwargs),
    )


def build_script_prompt(user_script: str, max_chars: int = DEFAULT_SCRIPT_CHARS) -> str:
    """Render the user turn carrying the (clipped) script."""
    return _render("package", "script", script=user_script[:max_chars])


def assemble_instruction(
    user_script: str,
    style_name: str,
    aspect_ratio: str,
    keyframe_count: int,
    density_label: str,
    duration_label: str = "",
    character_description: str = "",
    max_script_chars: int = DEFAULT_SCRIPT_CHARS,
) -> str:
    """
    Full instruction text for one package request.

    Deterministic for identical inputs; the system section comes first and
    the script section last.
    """
    return _join_sections(
        build_package_system_prompt(
            style_name=style_name,
            aspect_ratio=aspect_ratio,
            keyframe_count=keyframe_count,
            density_label=density_label,
            duration_label=duration_label,
            character_description=character_description,
        ),
        build_script_prompt(user_script, max_chars=max_script_chars),
    )


def build_continuity_extraction_prompt() -> str:
    return _render("assists", "continuity_extraction")


def build_refine_system_prompt() -> str:
    return _render("assists", "refine_system")


def build_refine_prompt(visual_prompts: List[Dict[str, Any]], tokens: ContinuityTokens) -> str:
    return _render(
        "assists",
        "refine",
        cst=tokens.cst,
        bst=tokens.bst,
        gst=tokens.gst,
        vst=tokens.vst,
        scene_list=json.dumps(visual_prompts, ensure_ascii=False),
    )


def build_enhance_visual_prompt(prompt: str, style_name: str, aspect_ratio: str) -> str:
    preset = resolve_style(style_name)
    return _render(
        "assists",
        "enhance_visual",
        image_style=preset.image_style,
        aspect_ratio=aspect_ratio,
        negative_suffix=NEGATIVE_SUFFIX,
        prompt=prompt,
    )


def build_enhance_video_prompt(video_prompt: str, visual_prompt: str, style_name: str) -> str:
    preset = resolve_style(style_name)
    return _render(
        "assists",
        "enhance_video",
        visual_prompt=visual_prompt,
        video_style=preset.video_style,
        video_prompt=video_prompt,
    )


def build_sfx_prompt(mood: str, title: str) -> str:
    return _render("assists", "sfx_cues", mood=mood, title=title)


def build_viral_script_prompt(config: ViralScriptConfig) -> str:
    return _render(
        "assists",
        "viral_script",
        topic=config.topic,
        duration=config.duration,
        emotion_target=config.emotion_target,
        audience=config.audience,
        language=config.language,
        platform=config.platform,
        forbidden_words=config.forbidden_words or "none",
        cta_style=config.cta_style,
    )


def build_voiceover_system_prompt(config: ViralScriptConfig) -> str:
    return _render(
        "assists",
        "voiceover_system",
        language=config.language,
        emotion_target=config.emotion_target,
        audience=config.audience,
        character_pov=config.character_pov,
        cta_style=config.cta_style,
    )


def build_voiceover_prompt(narrative: str, max_chars: int) -> str:
    return _render("assists", "voiceover", narrative=narrative[:max_chars])


def build_speech_prompt(text: str, style: str, language: str) -> str:
    """Directorial voiceover packs are passed through untouched."""
    if text.startswith("# AUDIO PROFILE:"):
        return text
    return _render("assists", "speech", language=language, style=style, text=text)
