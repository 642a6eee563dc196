"""Tests for calamine.config."""

import math

import pytest
from pydantic import ValidationError

from calamine.config import (
    DEFAULT_WEIGHTS,
    ConfigError,
    FilterConfig,
    load_config,
)


class TestFilterConfig:
    def test_defaults(self):
        config = FilterConfig()
        assert config.weights == DEFAULT_WEIGHTS
        assert config.opacity_threshold == 0.3
        assert config.whitespace_min_length == 3
        assert "script" in config.blacklist
        assert config.annotate is False

    def test_partial_weights_merge_over_defaults(self):
        config = FilterConfig(weights={"schema_bias": 900})
        assert config.weights["schema_bias"] == 900
        assert config.weights["text_density"] == DEFAULT_WEIGHTS["text_density"]

    def test_unknown_signal_rejected(self):
        with pytest.raises(ValidationError, match="unknown signal"):
            FilterConfig(weights={"magic_bias": 1.0})

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_weight_rejected(self, value):
        with pytest.raises(ValidationError):
            FilterConfig(weights={"tag_bias": value})

    def test_non_finite_keyword_rejected(self):
        with pytest.raises(ValidationError):
            FilterConfig(attribute_keywords={"article": math.inf})

    def test_keyword_must_be_single_token(self):
        with pytest.raises(ValidationError):
            FilterConfig(attribute_keywords={"main content": 10})

    def test_non_numeric_weight_rejected(self):
        with pytest.raises(ValidationError):
            FilterConfig(weights={"tag_bias": "heavy"})

    @pytest.mark.parametrize(
        ("field", "value"),
        [("opacity_threshold", -0.1), ("opacity_threshold", 1.5), ("whitespace_min_length", -1)],
    )
    def test_out_of_range_thresholds(self, field, value):
        with pytest.raises(ValidationError):
            FilterConfig(**{field: value})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            FilterConfig(blacklst=["script"])

    def test_frozen(self):
        config = FilterConfig()
        with pytest.raises(ValidationError):
            config.annotate = True

    def test_tag_names_normalized(self):
        config = FilterConfig(blacklist=["  SCRIPT ", "Style"])
        assert config.blacklist == frozenset({"script", "style"})

    def test_empty_tag_name_rejected(self):
        with pytest.raises(ValidationError):
            FilterConfig(trimmable_tags=["br", "  "])

    @pytest.mark.parametrize("field", ["weights", "tag_bias", "child_bias", "attribute_keywords"])
    def test_tables_read_only(self, field):
        config = FilterConfig()
        with pytest.raises(TypeError):
            getattr(config, field)["div"] = 1.0

    def test_whitelist_read_only(self):
        config = FilterConfig()
        with pytest.raises(TypeError):
            config.attribute_whitelist["img"] = frozenset({"onerror"})

    def test_supplied_tables_read_only(self):
        config = FilterConfig(weights={"schema_bias": 900}, tag_bias={"DIV": 5})
        with pytest.raises(TypeError):
            config.weights["schema_bias"] = 0.0
        with pytest.raises(TypeError):
            config.tag_bias["div"] = 0.0
        assert config.tag_bias == {"div": 5}

    def test_default_tables_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_WEIGHTS["text_density"] = 10.0

    def test_instances_do_not_share_state(self):
        first = FilterConfig()
        second = FilterConfig(weights={"text_density": 2.0})
        assert first.weights["text_density"] == DEFAULT_WEIGHTS["text_density"]
        assert second.weights["text_density"] == 2.0

    @pytest.mark.parametrize("field", ["tag_bias", "child_bias"])
    @pytest.mark.parametrize("key", ["", "   "])
    def test_empty_bias_tag_rejected(self, field, key):
        with pytest.raises(ValidationError, match="non-empty"):
            FilterConfig(**{field: {key: 10}})

    def test_empty_whitelist_tag_rejected(self):
        with pytest.raises(ValidationError):
            FilterConfig(attribute_whitelist={" ": ["src"]})

    def test_tracking_hosts_normalized(self):
        config = FilterConfig(tracking_hosts=["Pixel.Example.COM."])
        assert config.tracking_hosts == frozenset({"pixel.example.com"})

    def test_whitelist_none_allowed(self):
        assert FilterConfig(attribute_whitelist=None).attribute_whitelist is None

    def test_cap_must_be_finite(self):
        with pytest.raises(ValidationError):
            FilterConfig(text_bias_cap=math.inf)
        assert FilterConfig(text_bias_cap=None).text_bias_cap is None


class TestLoadConfig:
    def test_default_section_only(self, profiles_path):
        config = load_config(profiles_path)
        assert config.weights["schema_bias"] == 800
        assert config.weights["text_density"] == DEFAULT_WEIGHTS["text_density"]
        assert config.tracking_hosts == frozenset({"pixel.quantserve.com", "stats.example.net"})
        assert config.condense_tagnames is True

    def test_domain_tables_merge_key_by_key(self, profiles_path):
        config = load_config(profiles_path, url="https://www.example.com/post/1")
        assert config.condense_tagnames is False
        assert config.weights["text_density"] == 0.5
        assert config.weights["schema_bias"] == 800

    def test_most_specific_domain_wins(self, profiles_path):
        config = load_config(profiles_path, url="https://news.example.com/a")
        assert config.annotate is True
        assert config.condense_tagnames is True
        assert config.weights["text_density"] == DEFAULT_WEIGHTS["text_density"]

    def test_lookalike_domain_not_matched(self, profiles_path):
        config = load_config(profiles_path, url="https://notexample.com/a")
        assert config.condense_tagnames is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("default: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_values_wrapped(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("default:\n  weights:\n    magic_bias: 3\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid config"):
            load_config(path)

    def test_empty_tag_key_in_profile(self, tmp_path):
        path = tmp_path / "bias.yaml"
        path.write_text('default:\n  tag_bias:\n    "": 10\n', encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid config"):
            load_config(path)

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == FilterConfig()

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)
