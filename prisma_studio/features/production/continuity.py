"""Continuity token substitution for production packages."""

import re
from typing import Dict, Optional

from prisma_studio.features.production.schemas import ContinuityTokens, ProductionPackage


TOKEN_MARKERS = ("CST", "BST", "GST", "VST")

_MARKER_PATTERN = re.compile(r"\[(%s)\]" % "|".join(TOKEN_MARKERS))


def _replacements(tokens: ContinuityTokens) -> Dict[str, str]:
    values = tokens.model_dump()
    return {
        marker: values[marker.lower()].strip()
        for marker in TOKEN_MARKERS
        if values[marker.lower()].strip()
    }


def substitute_continuity_tokens(text: Optional[str], tokens: ContinuityTokens) -> Optional[str]:
    """Replace [CST]/[BST]/[GST]/[VST] markers in one pass; empty tokens leave their marker in place."""
    if not text:
        return text
    replacements = _replacements(tokens)
    return _MARKER_PATTERN.sub(lambda match: replacements.get(match.group(1), match.group(0)), text)


def apply_continuity_tokens(package: ProductionPackage, tokens: ContinuityTokens) -> ProductionPackage:
    """Return a new package carrying the tokens, with every prompt substituted."""
    visual_prompts = [
        prompt.model_copy(update={
            "prompt": substitute_continuity_tokens(prompt.prompt, tokens),
            "video_prompt": substitute_continuity_tokens(prompt.video_prompt, tokens),
        })
        for prompt in package.visual_prompts
    ]
    return package.model_copy(update={
        "visual_prompts": visual_prompts,
        "cst": tokens.cst or package.cst,
        "bst": tokens.bst or package.bst,
        "gst": tokens.gst or package.gst,
        "vst": tokens.vst or package.vst,
    })
