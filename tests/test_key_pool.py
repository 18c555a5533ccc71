"""
Tests for credential discovery and masking.
"""

import pytest

from edumagic.gateway.key_pool import KeyPoolResolver, mask_key


class TestResolve:
    """Tests for KeyPoolResolver.resolve()."""

    def test_base_then_numbered_then_underscored(self):
        resolver = KeyPoolResolver(config={
            "RAPID_API_KEY_2": "c",
            "RAPID_API_KEY1": "b",
            "RAPID_API_KEY": "a",
            "RAPID_API_KEY2": "d",
        })
        # Per index: PREFIX{i} before PREFIX_{i}
        assert resolver.resolve("RAPID_API_KEY") == ["a", "b", "d", "c"]

    def test_blank_values_skipped_others_kept_verbatim(self):
        resolver = KeyPoolResolver(config={
            "GEMINI_API_KEY": "",
            "GEMINI_API_KEY1": "   ",
            "GEMINI_API_KEY2": " real-key ",
        })
        assert resolver.resolve("GEMINI_API_KEY") == [" real-key "]

    def test_duplicates_keep_first_occurrence(self):
        resolver = KeyPoolResolver(config={
            "OPENAI_API_KEY": "same",
            "OPENAI_API_KEY1": "other",
            "OPENAI_API_KEY_1": "same",
        })
        assert resolver.resolve("OPENAI_API_KEY") == ["same", "other"]

    def test_no_keys_gives_empty_list(self):
        assert KeyPoolResolver(config={}).resolve("GPT_API_KEY") == []

    def test_index_beyond_max_is_ignored(self):
        resolver = KeyPoolResolver(config={"RAPID_API_KEY11": "late"}, max_index=10)
        assert resolver.resolve("RAPID_API_KEY") == []

    def test_other_families_do_not_leak(self):
        resolver = KeyPoolResolver(config={"RAPID_API_KEY": "r", "GPT_API_KEY": "g"})
        assert resolver.resolve("RAPID_API_KEY") == ["r"]

    def test_empty_prefix_rejected(self):
        with pytest.raises(ValueError):
            KeyPoolResolver(config={}).resolve("")

    def test_snapshot_ignores_later_changes(self):
        config = {"GEMINI_API_KEY": "k1"}
        resolver = KeyPoolResolver(config=config)
        config["GEMINI_API_KEY1"] = "k2"
        assert resolver.resolve("GEMINI_API_KEY") == ["k1"]

    def test_reads_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("GPT_API_KEY3", "from-env")
        assert "from-env" in KeyPoolResolver().resolve("GPT_API_KEY")


class TestDescribe:

    def test_describe_masks_and_names_slots(self):
        resolver = KeyPoolResolver(config={
            "RAPID_API_KEY": "abcdef1234567890wxyz",
            "RAPID_API_KEY_1": "short",
        })
        slots = resolver.describe("RAPID_API_KEY")
        assert [s.name for s in slots] == ["RAPID_API_KEY", "RAPID_API_KEY_1"]
        assert slots[0].masked_key == "abcdef...wxyz"
        assert slots[1].masked_key == "***"
        assert resolver.count("RAPID_API_KEY") == 2


class TestMaskKey:

    def test_long_key_keeps_six_and_four(self):
        assert mask_key("sk-proj-1234567890abcd") == "sk-pro...abcd"

    def test_short_key_fully_hidden(self):
        assert mask_key("1234567890") == "***"
        assert mask_key("") == ""
