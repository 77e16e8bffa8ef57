"""
Tests for package normalization.
"""

from prisma_studio.features.production.normalizer import coerce_visual_prompt, normalize
from prisma_studio.features.production.styles import resolve_style


def test_empty_reply_fills_every_field(generation_request):
    package = normalize({}, generation_request, resolve_style("Cyberpunk"))

    assert package.metadata.topic == generation_request.script[:30]
    assert package.metadata.mood == "Cinematic"
    assert package.metadata.visual_style == "Cyberpunk"
    assert package.metadata.aspect_ratio == "16:9"
    assert package.metadata.duration == "1 Minute"
    assert package.seo.best_title == "Untitled"
    assert package.seo.alt_titles == []
    assert package.story == generation_request.script
    assert package.titles == []
    assert package.audio_map == []
    assert package.visual_prompts == []
    assert (package.cst, package.bst, package.gst) == ("", "", "")
    assert package.vst == "VST_12 Neon Night City"


def test_non_mapping_reply_is_treated_as_empty(generation_request):
    package = normalize(["not", "a", "package"], generation_request, resolve_style("Cyberpunk"))
    assert package.visual_prompts == []
    assert package.seo.best_title == "Untitled"


def test_over_long_scene_list_is_truncated_in_order(generation_request):
    scenes = [{"label": f"Shot {i}", "prompt": f"[BST]. [GST]. {i}"} for i in range(12)]
    package = normalize({"visualPrompts": scenes}, generation_request, resolve_style("Cyberpunk"))

    assert len(package.visual_prompts) == 8
    assert [p.label for p in package.visual_prompts] == [f"Shot {i}" for i in range(8)]


def test_short_scene_list_is_not_padded(generation_request):
    scenes = [{"label": "Only", "prompt": "[CST] inside [BST]. [GST]."}]
    package = normalize({"visualPrompts": scenes}, generation_request, resolve_style("Cyberpunk"))
    assert len(package.visual_prompts) == 1


def test_titles_fall_back_to_scene_labels(generation_request):
    scenes = [{"label": "Harbor"}, {"label": "Storm"}]
    package = normalize({"visualPrompts": scenes}, generation_request, resolve_style("Cyberpunk"))
    assert package.titles == ["Harbor", "Storm"]


def test_model_fields_are_carried_over(generation_request):
    parsed = {
        "metadata": {"topic": "Lighthouse", "mood": "Tense"},
        "seo": {
            "bestTitle": "The Last Signal",
            "altTitles": ["Bottle", "  ", 7],
            "tags": ["storm", "sea"],
            "hashtags": ["#storm", "#sea"],
            "sunoPrompt": "slow strings",
        },
        "story": "A keeper reads a note.",
        "keyframe_plan_titles": ["Arrival"],
    }
    package = normalize(parsed, generation_request, resolve_style("Cyberpunk"))

    assert package.metadata.topic == "Lighthouse"
    assert package.metadata.mood == "Tense"
    assert package.seo.best_title == "The Last Signal"
    assert package.seo.alt_titles == ["Bottle"]
    assert package.seo.tags == "storm, sea"
    assert package.seo.hashtags == "#storm #sea"
    assert package.seo.suno_prompt == "slow strings"
    assert package.story == "A keeper reads a note."
    assert package.titles == ["Arrival"]


def test_type_inference():
    assert coerce_visual_prompt({"type": "scene", "prompt": "[CST] inside"}, 0).type == "scene"
    assert coerce_visual_prompt({"requiresCharacter": True}, 0).type == "character"
    assert coerce_visual_prompt({"requiresCharacter": False, "prompt": "[CST]"}, 0).type == "scene"
    assert coerce_visual_prompt({"prompt": "[CST] inside [BST]."}, 0).type == "character"
    assert coerce_visual_prompt({"prompt": "[BST]. [GST]."}, 0).type == "scene"


def test_scene_entry_coercion():
    prompt = coerce_visual_prompt(
        {
            "videoPrompt": "Scene: dock. Camera: wide.",
            "estimatedDuration": 6,
            "sfx_cues": {"primary": "waves"},
            "cameraAngle": "low",
        },
        2,
    )
    assert prompt.label == "Scene 3"
    assert prompt.video_prompt == "Scene: dock. Camera: wide."
    assert prompt.estimated_duration == 6.0
    assert prompt.sfx_cues.primary == "waves"
    assert prompt.sfx_cues.secondary == "Atmospheric"
    assert prompt.camera_angle == "low"


def test_unusable_entries_are_skipped(generation_request):
    parsed = {"visualPrompts": [None, "[BST]. [GST]. raw string", 42]}
    package = normalize(parsed, generation_request, resolve_style("Cyberpunk"))

    assert len(package.visual_prompts) == 1
    assert package.visual_prompts[0].prompt == "[BST]. [GST]. raw string"
    assert package.visual_prompts[0].label == "Scene 2"
