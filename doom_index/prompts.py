"""Prompt templates — base and negative prompt per template name."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PromptTemplate:
    id: str
    base_prompt: str
    negative_prompt: str


_DEFAULT = PromptTemplate(
    id="default",
    base_prompt=(
        "Square surreal oil painting in a baroque gold frame, dark museum lighting. "
        "Depict the current state of the world."
    ),
    negative_prompt="low quality, bad anatomy, disfigured, text artifacts",
)

_EXPERIMENTAL = PromptTemplate(
    id="experimental",
    base_prompt=(
        "Abstract expressionist painting, dynamic brushstrokes, vibrant colors, deep textures, "
        "reflecting global data trends."
    ),
    negative_prompt="monochromatic, dull, flat, realistic, text, signature",
)

_TEMPLATES = {
    "default": _DEFAULT,
    "experimental": _EXPERIMENTAL,
}


def get_prompt_template(name: str) -> PromptTemplate:
    return _TEMPLATES.get(name, _DEFAULT)


def get_all_templates() -> dict[str, dict[str, str]]:
    """Return all prompt templates keyed by template name."""
    return {
        name: {"base_prompt": t.base_prompt, "negative_prompt": t.negative_prompt}
        for name, t in _TEMPLATES.items()
    }
