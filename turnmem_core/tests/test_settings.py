from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from turnmem_core.settings import (
    GenerationSettings,
    attribute_lookup,
    first_setting,
    mapping_lookup,
    resolve_generation_settings,
    resolve_window,
)


class TestFirstSetting:
    """Test ordered lookups."""

    def test_first_present_value_wins(self) -> None:
        lookups = [
            mapping_lookup("options", {"top_p": None}),
            mapping_lookup("client", {"top_p": 0.5}),
            mapping_lookup("kwargs", {"top_p": 0.9}),
        ]

        assert first_setting(lookups, "top_p") == 0.5

    def test_empty_string_is_absent(self) -> None:
        lookups = [
            mapping_lookup("options", {"base_url": ""}),
            attribute_lookup("config", SimpleNamespace(base_url="http://x")),
        ]

        assert first_setting(lookups, "base_url") == "http://x"

    def test_nothing_found(self) -> None:
        assert first_setting([mapping_lookup("options", None)], "top_p") is None


class TestResolveGenerationSettings:
    """Test collecting generation settings."""

    def test_collects_across_sources(self) -> None:
        lookups = [
            mapping_lookup("options", {"temperature": 0.2}),
            mapping_lookup("kwargs", {"max_tokens": 100, "temperature": 0.9}),
        ]

        settings = resolve_generation_settings(lookups, "gpt-4.1")

        assert settings.temperature == 0.2
        assert settings.max_tokens == 100
        assert settings.top_p is None

    def test_zero_temperature_is_unset(self) -> None:
        settings = resolve_generation_settings(
            [mapping_lookup("options", {"temperature": 0})], "gpt-4.1"
        )

        assert settings.temperature is None

    @pytest.mark.parametrize("model", ["o1", "o3-mini", "gpt-4o", "gpt-4o-mini"])
    def test_fixed_temperature_models(self, model: str) -> None:
        """Models that only accept the default temperature get 1 when unset."""
        settings = resolve_generation_settings(
            [mapping_lookup("options", {"temperature": 0})], model
        )

        assert settings.temperature == 1.0

    def test_explicit_temperature_kept_for_fixed_models(self) -> None:
        settings = resolve_generation_settings(
            [mapping_lookup("options", {"temperature": 0.7})], "gpt-4o"
        )

        assert settings.temperature == 0.7

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            resolve_generation_settings([mapping_lookup("options", {"top_p": 3})], "gpt-4.1")

    def test_reasoning_effort(self) -> None:
        settings = GenerationSettings(reasoning_effort="low")

        assert settings.model_dump(exclude_none=True) == {"reasoning_effort": "low"}


class TestResolveWindow:
    """Test window size resolution."""

    def test_first_positive_int(self) -> None:
        lookups = [
            ("config", lambda _key: None),
            ("backend", lambda key: {"window": 12}[key]),
        ]

        assert resolve_window(lookups) == 12

    def test_invalid_values_ignored(self) -> None:
        for value in (0, -3, "10", True, 2.5):
            assert resolve_window([("config", lambda _key, v=value: v)]) is None

    def test_no_lookups(self) -> None:
        assert resolve_window([]) is None
