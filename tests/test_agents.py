"""
Tests for production agents using a scripted LLM.
"""

import json

import pytest

from prisma_studio.core.errors import JsonStructuralError, RateLimitError, ThirdPartyError
from prisma_studio.features.production import agents
from prisma_studio.features.production.schemas import (
    ContinuityTokens,
    PackageMetadata,
    ProductionPackage,
    SeoMetadata,
    ViralScriptConfig,
    VisualPrompt,
)


BROKEN_JSON = '{"story": tru}'


def _package_reply(scene_count):
    return json.dumps({
        "metadata": {"topic": "Lighthouse", "mood": "Eerie"},
        "seo": {"bestTitle": "Signal", "tags": "storm, sea"},
        "story": "A keeper answers the sea.",
        "keyframe_plan_titles": [f"Beat {i}" for i in range(scene_count)],
        "visualPrompts": [
            {"label": f"Beat {i}", "prompt": "[BST]. [GST].", "videoPrompt": "Scene: waves."}
            for i in range(scene_count)
        ],
    })


def test_package_generation_sends_contract_and_normalizes(generation_request, make_llm):
    llm = make_llm(["```json\n" + _package_reply(8) + "\n```"])

    package = agents.generate_movie_package(generation_request, llm=llm)

    assert len(package.visual_prompts) == 8
    assert package.seo.best_title == "Signal"
    assert package.vst == "VST_12 Neon Night City"

    call = llm.calls[0]
    assert call["response_mime_type"] == "application/json"
    assert call["task"] == "generate_package"
    assert call["max_retries"] == 5
    assert "EXACTLY 8 scenes" in call["system_instruction"]
    assert call["prompt"].startswith('Script Content: "A lighthouse keeper')


def test_truncated_reply_is_recovered(generation_request, make_llm):
    reply = _package_reply(3)
    cut = reply[: reply.rindex('{"label"') + 12]
    llm = make_llm([cut])

    package = agents.generate_movie_package(generation_request, llm=llm)

    assert [p.label for p in package.visual_prompts] == ["Beat 0", "Beat 1"]
    assert len(llm.calls) == 1


def test_structural_failure_regenerates_once(generation_request, make_llm):
    llm = make_llm([BROKEN_JSON, _package_reply(8)])

    package = agents.generate_movie_package(generation_request, llm=llm)

    assert len(llm.calls) == 2
    assert len(package.visual_prompts) == 8


def test_second_structural_failure_raises(generation_request, make_llm):
    llm = make_llm([BROKEN_JSON, BROKEN_JSON])

    with pytest.raises(JsonStructuralError):
        agents.generate_movie_package(generation_request, llm=llm)
    assert len(llm.calls) == 2


def test_rate_limit_errors_propagate(generation_request, make_llm):
    llm = make_llm([RateLimitError()])
    with pytest.raises(RateLimitError):
        agents.generate_movie_package(generation_request, llm=llm)
    assert len(llm.calls) == 1


def test_extract_continuity_tokens(make_llm):
    llm = make_llm(['{"cst": " red coat ", "bst": "harbor", "gst": 5}'])

    tokens = agents.extract_continuity_tokens(b"img", "image/jpeg", llm=llm)

    assert tokens == ContinuityTokens(cst="red coat", bst="harbor", gst="", vst="")
    assert llm.calls[0]["image_bytes"] == b"img"
    assert llm.calls[0]["image_mime_type"] == "image/jpeg"


def _small_package():
    return ProductionPackage(
        metadata=PackageMetadata(
            topic="Harbor", mood="Calm", visual_style="Studio Ghibli", aspect_ratio="16:9", duration="1 Minute"
        ),
        seo=SeoMetadata(),
        visual_prompts=[VisualPrompt(label="Dock", type="character", prompt="[CST] inside [BST].")],
    )


@pytest.mark.parametrize("reply", [
    '{"visualPrompts": [{"label": "Dock", "prompt": "sailor inside pier."}]}',
    '[{"label": "Dock", "prompt": "sailor inside pier."}]',
    '{"visualPrompts": {"0": {"label": "Dock", "prompt": "sailor inside pier."}}}',
])
def test_refine_accepts_reply_shapes(reply, make_llm):
    llm = make_llm([reply])

    refined = agents.refine_package_prompts(_small_package(), ContinuityTokens(cst="sailor"), llm=llm)

    assert [(p.label, p.prompt) for p in refined] == [("Dock", "sailor inside pier.")]
    assert "CST=sailor" in llm.calls[0]["prompt"]


def test_enhancers_return_input_on_failure(make_llm):
    llm = make_llm([ThirdPartyError("down"), ThirdPartyError("down")])

    assert agents.enhance_visual_prompt("orig", "Cyberpunk", "16:9", llm=llm) == "orig"
    assert agents.enhance_video_prompt("motion", "visual", "Cyberpunk", llm=llm) == "motion"


def test_enhancers_return_model_text(make_llm):
    llm = make_llm(["better prompt", "0:00-0:02 Scene: ..."])

    assert agents.enhance_visual_prompt("orig", "Cyberpunk", "16:9", llm=llm) == "better prompt"
    assert agents.enhance_video_prompt("motion", "visual", "Cyberpunk", llm=llm) == "0:00-0:02 Scene: ..."


def test_sfx_cues_fallback_and_partial_reply(make_llm):
    assert agents.generate_sfx_cues("Tense", "Storm", llm=make_llm([RateLimitError()])).primary == "Ambient soundscape"

    cues = agents.generate_sfx_cues("Tense", "Storm", llm=make_llm(['{"primary": "thunder"}']))
    assert cues.primary == "thunder"
    assert cues.secondary == "Atmospheric"


def test_viral_script(make_llm):
    llm = make_llm(['{"voiceover_text": "Did you know?", "performance_prompt": "fast", "segment_map": ["Hook", 3]}'])

    output = agents.generate_viral_script(ViralScriptConfig(topic="Octopus"), llm=llm)

    assert output.voiceover_text == "Did you know?"
    assert output.segment_map == ["Hook"]


def test_voiceover_pack_fallback_text(make_llm):
    llm = make_llm([""])
    pack = agents.generate_voiceover_pack(ViralScriptConfig(topic="Octopus"), "x" * 3000, llm=llm)

    assert pack == "Failed to generate prompt."
    assert llm.calls[0]["prompt"] == "Narrative: " + "x" * 2000


def test_synthesize_speech_builds_prompt(make_llm):
    llm = make_llm()

    audio = agents.synthesize_speech("Hello", "Puck", "Warm", "EN", llm=llm)

    assert audio == b"\x00\x01" * 8
    assert llm.speech_calls == [{"text": "Language: EN. Style: Warm. Script: Hello", "voice_id": "Puck"}]
