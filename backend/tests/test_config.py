"""
Tests for RuntimeConfig runtime updates.
"""

from config import RuntimeConfig


class TestRuntimeConfig:
    """Type coercion, range validation and reset."""

    def setup_method(self):
        self.config = RuntimeConfig()

    def test_numeric_string_coerced(self):
        result = self.config.update(history_capacity="20", repetition_threshold="0.65")

        assert result["updated"] == ["history_capacity", "repetition_threshold"]
        assert self.config.history_capacity == 20
        assert self.config.repetition_threshold == 0.65

    def test_non_numeric_string_ignored(self):
        before = self.config.history_capacity
        result = self.config.update(history_capacity="abc")

        assert result["ignored"] == ["history_capacity"]
        assert self.config.history_capacity == before

    def test_bool_for_number_ignored(self):
        assert self.config.update(reply_memory_size=True)["ignored"] == ["reply_memory_size"]

    def test_whole_float_for_int(self):
        self.config.update(history_capacity=12.0)
        assert self.config.history_capacity == 12
        assert isinstance(self.config.history_capacity, int)
        assert self.config.update(history_capacity=12.5)["ignored"] == ["history_capacity"]

    def test_int_for_float(self):
        self.config.update(disclosure_probability=1)
        assert self.config.disclosure_probability == 1.0
        assert isinstance(self.config.disclosure_probability, float)

    def test_bool_strings(self):
        self.config.update(typing_enabled="false")
        assert self.config.typing_enabled is False
        self.config.update(typing_enabled="Yes")
        assert self.config.typing_enabled is True
        assert self.config.update(typing_enabled="maybe")["ignored"] == ["typing_enabled"]

    def test_range_checked_after_coercion(self):
        result = self.config.update(history_capacity="1000")
        assert result["ignored"] == ["history_capacity"]

    def test_unknown_and_private_keys(self):
        result = self.config.update(nope=1, _lock=None)
        assert result["updated"] == []
        assert result["ignored"] == ["nope", "_lock"]

    def test_update_count(self):
        first = self.config.update(severity_window=3)["update_count"]
        assert self.config.update(severity_window="4")["update_count"] == first + 1

    def test_reset(self):
        default = RuntimeConfig().history_capacity
        self.config.update(history_capacity=50)
        self.config.reset()
        assert self.config.history_capacity == default

    def test_to_dict_is_public(self):
        data = self.config.to_dict()
        assert "history_capacity" in data
        assert not any(key.startswith("_") for key in data)
