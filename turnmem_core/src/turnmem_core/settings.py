"""Generation settings and ordered setting lookups.

Provider configuration can carry the same setting in several places (explicit
options, top-level attributes, client configuration, extra kwargs). Lookups are
expressed as a fixed, ordered list of named strategies; the first one that
yields a value wins.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field

Lookup = tuple[str, Callable[[str], Any]]

# OpenAI "o" reasoning models and gpt-4o reject temperatures other than 1.
_FIXED_TEMPERATURE_MODELS = (re.compile(r"^o\d"), re.compile(r"^gpt-4o"))


class GenerationSettings(BaseModel):
    """Sampling settings forwarded to the language model."""

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    max_tokens: int | None = Field(default=None, ge=1)
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    reasoning_effort: Literal["low", "medium", "high"] | None = None


def _present(value: Any) -> bool:
    return value is not None and value != ""


def first_setting(lookups: list[Lookup], key: str) -> Any:
    """Return the first non-empty value produced by ``lookups`` for ``key``.

    Args:
        lookups: Named lookup strategies, tried in order.
        key: Setting name.

    Returns:
        The first present value, or None.
    """
    for _name, lookup in lookups:
        value = lookup(key)
        if _present(value):
            return value
    return None


def mapping_lookup(name: str, mapping: Mapping[str, Any] | None) -> Lookup:
    """Build a lookup reading ``key`` from a mapping."""
    return name, lambda key: (mapping or {}).get(key)


def attribute_lookup(name: str, obj: Any) -> Lookup:
    """Build a lookup reading ``key`` as an attribute of ``obj``."""
    return name, lambda key: getattr(obj, key, None)


def resolve_generation_settings(lookups: list[Lookup], model: str) -> GenerationSettings:
    """Collect generation settings for ``model`` from ordered lookups.

    A temperature of 0 is treated as unset. Models that only accept the
    default temperature get ``temperature=1`` when none is set.
    """
    values = {
        field: first_setting(lookups, field)
        for field in GenerationSettings.model_fields
    }
    if not values.get("temperature"):
        values["temperature"] = None
        if any(p.match(model) for p in _FIXED_TEMPERATURE_MODELS):
            values["temperature"] = 1.0
    return GenerationSettings(**values)


def resolve_window(lookups: list[Lookup]) -> int | None:
    """Resolve the message window size from ordered lookups.

    Only positive integers count as a window.
    """
    for _name, lookup in lookups:
        value = lookup("window")
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
    return None
