"""
PRISMA Studio Production Agents
LLM calls that build, refine and enrich production packages.
"""

from typing import List, Optional

from prisma_studio.adapters.gemini_client import GeminiClient, get_gemini_client
from prisma_studio.core.config import get_settings
from prisma_studio.core.errors import JsonStructuralError, StudioException
from prisma_studio.core.logging import get_logger
from prisma_studio.features.production.json_repair import parse_recovered_json
from prisma_studio.features.production.keyframes import required_keyframe_count
from prisma_studio.features.production.normalizer import coerce_visual_prompts, normalize
from prisma_studio.features.production.prompts import (
    build_continuity_extraction_prompt,
    build_enhance_video_prompt,
    build_enhance_visual_prompt,
    build_package_system_prompt,
    build_refine_prompt,
    build_refine_system_prompt,
    build_script_prompt,
    build_sfx_prompt,
    build_speech_prompt,
    build_viral_script_prompt,
    build_voiceover_prompt,
    build_voiceover_system_prompt,
)
from prisma_studio.features.production.schemas import (
    ContinuityTokens,
    GenerationRequest,
    ProductionPackage,
    SfxCues,
    ViralScriptConfig,
    ViralScriptOutput,
    VisualPrompt,
)
from prisma_studio.features.production.styles import resolve_style

logger = get_logger(__name__)

JSON_MIME_TYPE = "application/json"
STRUCTURAL_REGENERATIONS = 1


def _clean_text(value: object, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def generate_movie_package(
    request: GenerationRequest,
    llm: Optional[GeminiClient] = None,
) -> ProductionPackage:
    """
    Generate, recover and normalize a production package.

    A reply that cannot be parsed even after repair triggers one fresh
    generation; a second failure surfaces JsonStructuralError.
    """
    llm = llm or get_gemini_client()
    settings = get_settings()
    keyframe_total = required_keyframe_count(request.video_duration, request.scene_density)
    style_preset = resolve_style(request.visual_style)

    system_prompt = build_package_system_prompt(
        style_name=request.visual_style,
        aspect_ratio=request.aspect_ratio,
        keyframe_count=keyframe_total,
        density_label=request.scene_density,
        duration_label=request.video_duration,
        character_description=request.character_description,
        style_preset=style_preset,
    )
    user_prompt = build_script_prompt(request.script, max_chars=settings.script_prompt_chars)

    for attempt in range(STRUCTURAL_REGENERATIONS + 1):
        logger.info(
            "package_generation_attempt",
            attempt=attempt + 1,
            keyframe_total=keyframe_total,
            visual_style=request.visual_style,
            density=request.scene_density,
            duration=request.video_duration,
        )
        response = llm.generate_text(
            prompt=user_prompt,
            system_instruction=system_prompt,
            model=request.model_engine,
            response_mime_type=JSON_MIME_TYPE,
            max_output_tokens=settings.package_max_output_tokens,
            temperature=settings.package_temperature,
            max_retries=settings.package_rate_limit_retries,
            task="generate_package",
        )
        try:
            parsed = parse_recovered_json(response, task="generate_package")
        except JsonStructuralError as exc:
            logger.warning(
                "package_structural_failure",
                attempt=attempt + 1,
                response_length=len(response),
                details=exc.details,
            )
            if attempt >= STRUCTURAL_REGENERATIONS:
                raise
            continue

        package = normalize(parsed, request, style_preset)
        logger.info(
            "package_generation_success",
            attempt=attempt + 1,
            scenes=len(package.visual_prompts),
            keyframe_total=keyframe_total,
        )
        return package

    raise JsonStructuralError(details={"task": "generate_package"})


def extract_continuity_tokens(
    image_bytes: bytes,
    mime_type: str,
    llm: Optional[GeminiClient] = None,
) -> ContinuityTokens:
    """Read CST/BST/GST/VST descriptions off a reference image."""
    llm = llm or get_gemini_client()
    response = llm.generate_text(
        prompt=build_continuity_extraction_prompt(),
        response_mime_type=JSON_MIME_TYPE,
        image_bytes=image_bytes,
        image_mime_type=mime_type,
        task="extract_tokens",
    )
    parsed = parse_recovered_json(response, task="extract_tokens")
    data = parsed if isinstance(parsed, dict) else {}
    tokens = ContinuityTokens(**{
        key: _clean_text(data.get(key)) for key in ("cst", "bst", "gst", "vst")
    })
    logger.info("continuity_tokens_extracted", filled=[k for k, v in tokens.model_dump().items() if v])
    return tokens


def refine_package_prompts(
    package: ProductionPackage,
    tokens: ContinuityTokens,
    llm: Optional[GeminiClient] = None,
) -> List[VisualPrompt]:
    """Ask the model to weave continuity tokens into every scene prompt."""
    llm = llm or get_gemini_client()
    scene_list = [prompt.model_dump(exclude_none=True) for prompt in package.visual_prompts]
    response = llm.generate_text(
        prompt=build_refine_prompt(scene_list, tokens),
        system_instruction=build_refine_system_prompt(),
        response_mime_type=JSON_MIME_TYPE,
        task="refine_prompts",
    )
    parsed = parse_recovered_json(response, task="refine_prompts")

    if isinstance(parsed, list):
        results = parsed
    elif isinstance(parsed, dict):
        results = parsed.get("visualPrompts", parsed.get("visual_prompts"))
        if isinstance(results, dict):
            results = list(results.values())
        elif results is None:
            results = []
    else:
        results = []

    refined = coerce_visual_prompts(results)
    logger.info("package_prompts_refined", requested=len(scene_list), refined=len(refined))
    return refined


def enhance_visual_prompt(
    prompt: str,
    style_name: str,
    aspect_ratio: str,
    llm: Optional[GeminiClient] = None,
) -> str:
    """Rewrite a prompt into the master format; the original survives upstream failures."""
    llm = llm or get_gemini_client()
    try:
        enhanced = llm.generate_text(
            prompt=build_enhance_visual_prompt(prompt, style_name, aspect_ratio),
            task="enhance_visual",
        )
    except StudioException as exc:
        logger.warning("enhance_visual_fallback", error=exc.message, code=exc.code.value)
        return prompt
    return enhanced or prompt


def enhance_video_prompt(
    video_prompt: str,
    visual_prompt: str,
    style_name: str,
    llm: Optional[GeminiClient] = None,
) -> str:
    """Expand a motion prompt into a timestamped 3-shot plan."""
    llm = llm or get_gemini_client()
    try:
        enhanced = llm.generate_text(
            prompt=build_enhance_video_prompt(video_prompt, visual_prompt, style_name),
            task="enhance_video",
        )
    except StudioException as exc:
        logger.warning("enhance_video_fallback", error=exc.message, code=exc.code.value)
        return video_prompt
    return enhanced or video_prompt


def generate_sfx_cues(mood: str, title: str, llm: Optional[GeminiClient] = None) -> SfxCues:
    llm = llm or get_gemini_client()
    try:
        response = llm.generate_text(
            prompt=build_sfx_prompt(mood, title),
            response_mime_type=JSON_MIME_TYPE,
            task="generate_sfx",
        )
        parsed = parse_recovered_json(response, task="generate_sfx")
    except StudioException as exc:
        logger.warning("sfx_cues_fallback", error=exc.message, code=exc.code.value)
        return SfxCues()

    data = parsed if isinstance(parsed, dict) else {}
    defaults = SfxCues()
    return SfxCues(
        primary=_clean_text(data.get("primary"), defaults.primary),
        secondary=_clean_text(data.get("secondary"), defaults.secondary),
    )


def generate_viral_script(config: ViralScriptConfig, llm: Optional[GeminiClient] = None) -> ViralScriptOutput:
    llm = llm or get_gemini_client()
    response = llm.generate_text(
        prompt=build_viral_script_prompt(config),
        response_mime_type=JSON_MIME_TYPE,
        task="generate_viral_script",
    )
    parsed = parse_recovered_json(response, task="generate_viral_script")
    data = parsed if isinstance(parsed, dict) else {}
    segments = data.get("segment_map")
    return ViralScriptOutput(
        voiceover_text=_clean_text(data.get("voiceover_text")),
        performance_prompt=_clean_text(data.get("performance_prompt")),
        segment_map=[s for s in segments if isinstance(s, str)] if isinstance(segments, list) else [],
    )


def generate_voiceover_pack(
    config: ViralScriptConfig,
    narrative: str,
    llm: Optional[GeminiClient] = None,
) -> str:
    """Directorial voiceover prompt (audio profile, scene, notes, transcript)."""
    llm = llm or get_gemini_client()
    settings = get_settings()
    response = llm.generate_text(
        prompt=build_voiceover_prompt(narrative, settings.narrative_prompt_chars),
        system_instruction=build_voiceover_system_prompt(config),
        task="generate_vo_pack",
    )
    return response or "Failed to generate prompt."


def synthesize_speech(
    text: str,
    voice_id: str,
    style: str,
    language: str,
    llm: Optional[GeminiClient] = None,
) -> bytes:
    llm = llm or get_gemini_client()
    return llm.generate_speech(build_speech_prompt(text, style, language), voice_id)
