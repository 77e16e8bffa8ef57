"""
PRISMA Studio Visual Style Presets
Static catalog of art-director styles keyed by display name.
"""

from types import MappingProxyType
from typing import List, Mapping

from prisma_studio.features.production.schemas import StylePreset


__all__ = ["VISUAL_STYLE_PRESETS", "DEFAULT_STYLE", "resolve_style", "list_styles"]


DEFAULT_STYLE = "Studio Ghibli"

VISUAL_STYLE_PRESETS: Mapping[str, StylePreset] = MappingProxyType({
    "Stickman — 2D Classic": StylePreset(
        image_style="2D classic stickman animation, clean vector linework, flat shapes",
        video_style="2D classic stickman motion, smooth tweened animation, stable linework",
        recommended_vst="VST_01 Clean Digital Cinema",
    ),
    "Stickman — Blueprint": StylePreset(
        image_style="blueprint schematic style, cyan grid, white technical line drawings",
        video_style="blueprint line-reveal animation, technical callout pop-ins",
        recommended_vst="VST_14 Matte Minimalist",
    ),
    "Stickman — Chalkboard": StylePreset(
        image_style="chalkboard sketch style, rough chalk strokes, dusty smudges",
        video_style="chalk-writing reveal animation, smudge transitions, chalk dust",
        recommended_vst="VST_05 Overcast Documentary",
    ),
    "Stickman — 3D Render": StylePreset(
        image_style="simple 3D stick-figure render, smooth plastic, soft studio light",
        video_style="simple 3D character animation, smooth keyframed motion",
        recommended_vst="VST_09 High-Key Commercial",
    ),
    "Clay Animation": StylePreset(
        image_style="clay animation style, handcrafted clay textures, fingerprints",
        video_style="claymation motion, stop-motion jitter, tactile deformations",
        recommended_vst="VST_02 Warm Indie Drama",
    ),
    "Studio Ghibli": StylePreset(
        image_style="Studio Ghibli aesthetic, hand-painted watercolor anime, soft edges",
        video_style="painterly animation feel, gentle parallax pans, soft light transitions",
        recommended_vst="VST_08 Soft Pastel Dream",
    ),
    "Retro Anime": StylePreset(
        image_style="retro 90s anime cel style, ink lines, limited shading, halation",
        video_style="retro cel animation, limited-frame cadence, classic anime holds",
        recommended_vst="VST_06 Retro 35mm Film",
    ),
    "Pixar Style": StylePreset(
        image_style="stylized 3D family animation look, expressive faces, global illumination",
        video_style="stylized 3D animation, smooth character arcs, cinematic DOF",
        recommended_vst="VST_09 High-Key Commercial",
    ),
    "Stop-motion Animation": StylePreset(
        image_style="miniature practical set, handmade props, tactile textures",
        video_style="stop-motion feel, frame jitter, miniature parallax",
        recommended_vst="VST_07 Vintage 16mm Home-Movie",
    ),
    "Cutout Animation": StylePreset(
        image_style="2D cutout puppet look, layered paper shapes, crisp silhouettes",
        video_style="cutout puppet motion, hinge-like limb movement, layered parallax",
        recommended_vst="VST_14 Matte Minimalist",
    ),
    "3D CGI Animation": StylePreset(
        image_style="high quality 3D CGI frame, detailed materials, cinematic lighting",
        video_style="3D CGI cinematic, smooth camera moves, realistic motion blur",
        recommended_vst="VST_11 Anamorphic Cinematic",
    ),
    "Cinematic 8K": StylePreset(
        image_style="ultra-detailed cinematic realism, crisp textures, shallow DOF",
        video_style="cinematic realism, slow dolly tracking, realistic motion blur",
        recommended_vst="VST_11 Anamorphic Cinematic",
    ),
    "Documentary": StylePreset(
        image_style="documentary realism, natural lighting, candid framing",
        video_style="documentary camera language, handheld shake, natural ambience",
        recommended_vst="VST_05 Overcast Documentary",
    ),
    "Cyberpunk": StylePreset(
        image_style="cyberpunk neon city, wet reflective streets, magenta/cyan practicals",
        video_style="neon noir cinematic, slow tracking, volumetric haze motion",
        recommended_vst="VST_12 Neon Night City",
    ),
    "Film Noir": StylePreset(
        image_style="film noir, classic monochrome, hard shadows, dramatic contrast",
        video_style="noir pacing, slow push-in, chiaroscuro lighting, smoke drift",
        recommended_vst="VST_13 Black & White Classic",
    ),
    "Low-Key Thriller": StylePreset(
        image_style="low-key thriller lighting, deep shadows, tight contrast",
        video_style="suspense pacing, slow dolly in, handheld tension",
        recommended_vst="VST_10 Low-Key Thriller",
    ),
})


def resolve_style(name: str) -> StylePreset:
    """Exact-name lookup; unknown names resolve to the Studio Ghibli preset."""
    return VISUAL_STYLE_PRESETS.get(name) or VISUAL_STYLE_PRESETS[DEFAULT_STYLE]


def list_styles() -> List[str]:
    return list(VISUAL_STYLE_PRESETS.keys())
