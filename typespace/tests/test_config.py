"""
Tests for configuration loading.
"""

from __future__ import annotations

from typespace.config import FormatterConfig, TypeSpaceConfig


class TestTypeSpaceConfig:
    def test_defaults(self):
        config = TypeSpaceConfig()

        assert config.use_future_annotations
        assert config.snake_case_fields
        assert config.deduplicate_inline_objects
        assert not config.exclude_default_value_from_json
        assert config.formatter == FormatterConfig()

    def test_from_dict(self):
        config = TypeSpaceConfig.from_dict(
            {
                "use_sets": False,
                "add_generation_comment": True,
                "formatter": {"backend": "black", "line_length": 120},
            }
        )

        assert not config.use_sets
        assert config.add_generation_comment
        assert config.use_tuples
        assert config.formatter.backend == "black"
        assert config.formatter.line_length == 120
        assert config.formatter.enabled

    def test_unknown_keys_are_ignored(self):
        config = TypeSpaceConfig.from_dict({"no_such_option": 1})
        assert not hasattr(config, "no_such_option")

    def test_round_trip(self):
        config = TypeSpaceConfig(use_tuples=False, formatter=FormatterConfig(enabled=False, target_version="py313"))
        assert TypeSpaceConfig.from_dict(config.to_dict()) == config

    def test_to_dict_is_json_friendly(self):
        data = TypeSpaceConfig().to_dict()

        assert data["formatter"]["backend"] == "ruff"
        assert set(data) == {
            "use_future_annotations",
            "add_generation_comment",
            "use_tuples",
            "use_sets",
            "snake_case_fields",
            "exclude_default_value_from_json",
            "deduplicate_inline_objects",
            "formatter",
        }
