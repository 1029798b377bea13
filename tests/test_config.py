"""Tests for config.py: LayoutConfig defaults, aliases and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from choicemap.config import LayoutConfig
from choicemap.errors import ScenarioFormatError


class TestLayoutConfig:
    def test_defaults(self):
        config = LayoutConfig()
        assert (config.level_height, config.node_width, config.node_height, config.padding) == (120, 140, 44, 60)

    def test_camel_case_keys(self):
        config = LayoutConfig.model_validate({"levelHeight": 90, "nodeWidth": 100, "nodeHeight": 30, "padding": 5})
        assert config.level_height == 90
        assert config.node_width == 100
        assert config.node_height == 30
        assert config.padding == 5

    def test_snake_case_keys(self):
        assert LayoutConfig(node_width=80).node_width == 80

    def test_frozen(self):
        with pytest.raises(ValidationError):
            LayoutConfig().padding = 1


class TestCoerce:
    def test_none_gives_defaults(self):
        assert LayoutConfig.coerce(None) == LayoutConfig()

    def test_instance_passes_through(self):
        config = LayoutConfig(padding=0)
        assert LayoutConfig.coerce(config) is config

    def test_partial_mapping_fills_defaults(self):
        config = LayoutConfig.coerce({"nodeWidth": 200})
        assert config.node_width == 200
        assert config.level_height == 120

    @pytest.mark.parametrize("raw", [{"nodeWidth": 0}, {"levelHeight": -5}, {"padding": -1}, {"nodeHeight": "tall"}])
    def test_invalid_values(self, raw):
        with pytest.raises(ScenarioFormatError, match="invalid layout config"):
            LayoutConfig.coerce(raw)

    def test_non_mapping(self):
        with pytest.raises(ScenarioFormatError):
            LayoutConfig.coerce([120, 140, 44, 60])
