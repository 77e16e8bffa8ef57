"""
PRISMA Studio Production Handlers
FastAPI route handlers for package generation and asset helpers.
"""

import base64

from fastapi import APIRouter, Depends, Query

from prisma_studio.adapters.gemini_client import GeminiClient, decode_data_url, get_gemini_client
from prisma_studio.core.errors import SuccessResponse
from prisma_studio.core.logging import get_logger
from prisma_studio.features.production import agents
from prisma_studio.features.production.continuity import apply_continuity_tokens
from prisma_studio.features.production.keyframes import (
    DENSITY_OPTIONS,
    DURATION_OPTIONS,
    required_keyframe_count,
)
from prisma_studio.features.production.schemas import (
    ContinuityImageRequest,
    EnhanceVideoRequest,
    EnhanceVisualRequest,
    GenerationRequest,
    ImageRequest,
    KeyframeCountResponse,
    RefineRequest,
    SfxRequest,
    SpeechRequest,
    ViralScriptConfig,
    VoiceoverPackRequest,
)
from prisma_studio.features.production.styles import VISUAL_STYLE_PRESETS

logger = get_logger(__name__)

router = APIRouter(prefix="/production", tags=["production"])

SPEECH_SAMPLE_RATE = 24000


@router.post("/package", response_model=SuccessResponse)
def generate_package_endpoint(
    request: GenerationRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    """Generate a full production package from a script."""
    package = agents.generate_movie_package(request, llm=llm)
    return SuccessResponse(data=package.model_dump())


@router.get("/styles", response_model=SuccessResponse)
def list_styles_endpoint():
    """List the visual style presets."""
    return SuccessResponse(data={
        name: preset.model_dump() for name, preset in VISUAL_STYLE_PRESETS.items()
    })


@router.get("/keyframes", response_model=SuccessResponse)
def keyframe_count_endpoint(
    duration: str = Query("1 Minute"),
    density: str = Query("Standard"),
):
    """Keyframe budget for a duration/density pair, plus the known options."""
    result = KeyframeCountResponse(
        duration=duration,
        density=density,
        keyframe_count=required_keyframe_count(duration, density),
    )
    return SuccessResponse(data={
        **result.model_dump(),
        "duration_options": DURATION_OPTIONS,
        "density_options": DENSITY_OPTIONS,
    })


@router.post("/continuity-tokens", response_model=SuccessResponse)
def extract_tokens_endpoint(
    request: ContinuityImageRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    image_bytes, mime_type = decode_data_url(request.image_base64, request.mime_type)
    tokens = agents.extract_continuity_tokens(image_bytes, mime_type, llm=llm)
    return SuccessResponse(data=tokens.model_dump())


@router.post("/refine", response_model=SuccessResponse)
def refine_prompts_endpoint(
    request: RefineRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    """Model-driven continuity injection; returns the refined scene list."""
    refined = agents.refine_package_prompts(request.package, request.tokens, llm=llm)
    return SuccessResponse(data=[prompt.model_dump() for prompt in refined])


@router.post("/apply-tokens", response_model=SuccessResponse)
def apply_tokens_endpoint(request: RefineRequest):
    """Deterministic marker substitution; returns a new package."""
    package = apply_continuity_tokens(request.package, request.tokens)
    return SuccessResponse(data=package.model_dump())


@router.post("/prompts/enhance-visual", response_model=SuccessResponse)
def enhance_visual_endpoint(
    request: EnhanceVisualRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    prompt = agents.enhance_visual_prompt(request.prompt, request.visual_style, request.aspect_ratio, llm=llm)
    return SuccessResponse(data={"prompt": prompt})


@router.post("/prompts/enhance-video", response_model=SuccessResponse)
def enhance_video_endpoint(
    request: EnhanceVideoRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    prompt = agents.enhance_video_prompt(
        request.video_prompt,
        request.visual_prompt,
        request.visual_style,
        llm=llm,
    )
    return SuccessResponse(data={"video_prompt": prompt})


@router.post("/sfx", response_model=SuccessResponse)
def sfx_endpoint(
    request: SfxRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    cues = agents.generate_sfx_cues(request.mood, request.title, llm=llm)
    return SuccessResponse(data=cues.model_dump())


@router.post("/viral-script", response_model=SuccessResponse)
def viral_script_endpoint(
    config: ViralScriptConfig,
    llm: GeminiClient = Depends(get_gemini_client),
):
    output = agents.generate_viral_script(config, llm=llm)
    return SuccessResponse(data=output.model_dump())


@router.post("/voiceover-pack", response_model=SuccessResponse)
def voiceover_pack_endpoint(
    request: VoiceoverPackRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    pack = agents.generate_voiceover_pack(request.config, request.narrative, llm=llm)
    return SuccessResponse(data={"voiceover_pack": pack})


@router.post("/images", response_model=SuccessResponse)
def generate_image_endpoint(
    request: ImageRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    data_url = llm.generate_image(
        request.prompt,
        request.aspect_ratio,
        model=request.model,
        reference_image=request.reference_image,
    )
    return SuccessResponse(data={"image": data_url})


@router.post("/speech", response_model=SuccessResponse)
def generate_speech_endpoint(
    request: SpeechRequest,
    llm: GeminiClient = Depends(get_gemini_client),
):
    """Raw PCM (16-bit mono); container encoding is left to the client."""
    pcm = agents.synthesize_speech(request.text, request.voice_id, request.style, request.language, llm=llm)
    logger.info("speech_generated", voice_id=request.voice_id, audio_bytes=len(pcm))
    return SuccessResponse(data={
        "audio_base64": base64.b64encode(pcm).decode("ascii"),
        "encoding": "pcm_s16le",
        "sample_rate": SPEECH_SAMPLE_RATE,
        "channels": 1,
    })
