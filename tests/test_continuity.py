"""
Tests for continuity token substitution.
"""

from prisma_studio.features.production.continuity import (
    apply_continuity_tokens,
    substitute_continuity_tokens,
)
from prisma_studio.features.production.schemas import (
    ContinuityTokens,
    PackageMetadata,
    ProductionPackage,
    SeoMetadata,
    VisualPrompt,
)


def _package():
    return ProductionPackage(
        metadata=PackageMetadata(
            topic="Harbor", mood="Calm", visual_style="Studio Ghibli", aspect_ratio="16:9", duration="1 Minute"
        ),
        seo=SeoMetadata(),
        visual_prompts=[
            VisualPrompt(
                label="Dock",
                type="character",
                prompt="[CST] inside [BST]. [GST]. [VST] wide shot",
                video_prompt="Scene: [CST] waves.",
            ),
            VisualPrompt(label="Sea", type="scene", prompt="[BST]. [GST]."),
        ],
        vst="VST_08 Soft Pastel Dream",
    )


def test_markers_are_replaced():
    tokens = ContinuityTokens(cst="old sailor", bst="wooden pier", gst="golden hour", vst="VST_06")
    assert (
        substitute_continuity_tokens("[CST] inside [BST]. [GST]. [VST]", tokens)
        == "old sailor inside wooden pier. golden hour. VST_06"
    )


def test_empty_tokens_leave_markers():
    tokens = ContinuityTokens(cst="old sailor")
    assert substitute_continuity_tokens("[CST] inside [BST].", tokens) == "old sailor inside [BST]."


def test_none_text_passes_through():
    assert substitute_continuity_tokens(None, ContinuityTokens(cst="x")) is None


def test_apply_returns_new_package():
    package = _package()
    tokens = ContinuityTokens(cst="old sailor", bst="wooden pier", gst="golden hour")

    updated = apply_continuity_tokens(package, tokens)

    assert updated is not package
    assert updated.visual_prompts[0].prompt == "old sailor inside wooden pier. golden hour. [VST] wide shot"
    assert updated.visual_prompts[0].video_prompt == "Scene: old sailor waves."
    assert updated.visual_prompts[1].video_prompt is None
    assert (updated.cst, updated.bst, updated.gst) == ("old sailor", "wooden pier", "golden hour")
    assert updated.vst == "VST_08 Soft Pastel Dream"
    assert package.visual_prompts[0].prompt.startswith("[CST]")


def test_phrases_containing_markers_are_not_substituted_again():
    tokens = ContinuityTokens(cst="girl holding a [BST] sign", bst="wooden pier")
    assert (
        substitute_continuity_tokens("[CST] inside [BST].", tokens)
        == "girl holding a [BST] sign inside wooden pier."
    )
