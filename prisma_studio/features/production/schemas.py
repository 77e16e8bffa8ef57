"""
PRISMA Studio Production Schemas
Pydantic models for generation requests and production packages.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StylePreset(BaseModel):
    """Image/video style fragments for one visual style."""
    model_config = ConfigDict(frozen=True)

    image_style: str = Field(..., description="Fragment embedded in image prompts")
    video_style: str = Field(..., description="Fragment embedded in video-motion prompts")
    recommended_vst: str = Field(..., description="Suggested film-look continuity token")


class GenerationRequest(BaseModel):
    """User input for a production package."""
    script: str = Field(..., min_length=1, description="Source script or story idea")
    visual_style: str = Field(default="Studio Ghibli", description="Visual style preset name")
    scene_density: str = Field(default="Standard", description="Concise, Standard or Detailed")
    aspect_ratio: Literal["16:9", "9:16"] = Field(default="16:9")
    character_description: str = Field(default="", description="Optional recurring character notes")
    video_duration: str = Field(default="1 Minute", description="Target duration label")
    model_engine: Optional[str] = Field(default=None, description="Override for the text model")

    @field_validator("script")
    @classmethod
    def validate_script(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Script cannot be empty")
        return v


class PackageMetadata(BaseModel):
    topic: str
    mood: str
    visual_style: str
    aspect_ratio: str
    duration: str


class SeoMetadata(BaseModel):
    best_title: str = "Untitled"
    alt_titles: List[str] = Field(default_factory=list)
    video_description: str = ""
    tags: str = ""
    hashtags: str = ""
    thumbnail_prompt: str = ""
    suno_prompt: str = ""


class SfxCues(BaseModel):
    """Sound-effect suggestions for a scene."""
    primary: str = "Ambient soundscape"
    secondary: str = "Atmospheric"
    one_shot: Optional[str] = None
    avoid: Optional[str] = None


class VisualPrompt(BaseModel):
    """One keyframe of the storyboard."""
    label: str
    type: Literal["character", "scene"]
    prompt: str = ""
    video_prompt: Optional[str] = None
    requires_character: Optional[bool] = None
    mood_guide: Optional[str] = None
    visual_description: Optional[str] = None
    camera_angle: Optional[str] = None
    audio_atmosphere: Optional[str] = None
    audio_cue: Optional[str] = None
    dialogue: Optional[str] = None
    estimated_duration: Optional[float] = None
    sfx_cues: Optional[SfxCues] = None


class ProductionPackage(BaseModel):
    """Fully populated generation result."""
    metadata: PackageMetadata
    seo: SeoMetadata
    titles: List[str] = Field(default_factory=list)
    story: str = ""
    audio_map: List[str] = Field(default_factory=list)
    visual_prompts: List[VisualPrompt] = Field(default_factory=list)
    cst: str = Field(default="", description="Character continuity token")
    bst: str = Field(default="", description="Background continuity token")
    gst: str = Field(default="", description="Global lighting/texture continuity token")
    vst: str = Field(default="", description="Film-look continuity token")


class ContinuityTokens(BaseModel):
    cst: str = ""
    bst: str = ""
    gst: str = ""
    vst: str = ""


class ContinuityImageRequest(BaseModel):
    image_base64: str = Field(..., min_length=1, description="Reference image, raw base64 or data URL")
    mime_type: str = Field(default="image/png")


class RefineRequest(BaseModel):
    package: ProductionPackage
    tokens: ContinuityTokens


class EnhanceVisualRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    visual_style: str = "Studio Ghibli"
    aspect_ratio: str = "16:9"


class EnhanceVideoRequest(BaseModel):
    video_prompt: str = Field(..., min_length=1)
    visual_prompt: str = ""
    visual_style: str = "Studio Ghibli"
    aspect_ratio: str = "16:9"


class SfxRequest(BaseModel):
    mood: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)


class ViralScriptConfig(BaseModel):
    """Settings for short-form script and voiceover generation."""
    language: Literal["ID", "EN", "JP", "KR"] = "EN"
    platform: Literal["Shorts", "TikTok", "Reels"] = "Shorts"
    topic: str = Field(..., min_length=1)
    audience: str = "General"
    emotion_target: str = "Curiosity"
    duration: int = Field(default=30, ge=5, le=600, description="Target duration in seconds")
    accent: str = ""
    forbidden_words: str = ""
    cta_style: str = "No CTA"
    narrative: str = ""
    visual_style: str = "Studio Ghibli"
    character_context: Optional[str] = None
    character_pov: str = "Narrator"


class ViralScriptOutput(BaseModel):
    voiceover_text: str = ""
    performance_prompt: str = ""
    segment_map: List[str] = Field(default_factory=list)


class VoiceoverPackRequest(BaseModel):
    config: ViralScriptConfig
    narrative: str = Field(..., min_length=1)


class ImageRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    aspect_ratio: str = "16:9"
    model: Optional[str] = None
    reference_image: Optional[str] = Field(default=None, description="Data URL or raw base64 reference image")


class SpeechRequest(BaseModel):
    text: str = Field(..., min_length=1)
    voice_id: str = Field(default="Kore")
    style: str = "Natural"
    language: str = "EN"


class KeyframeCountResponse(BaseModel):
    duration: str
    density: str
    keyframe_count: int
