"""Tests for EnvReader."""

from pathlib import Path

import pytest

from mco.config.env import EnvReader


class TestEnvReader:
    """Tests for typed environment access."""

    def test_str(self):
        reader = EnvReader(env={"A": "value", "EMPTY": ""})
        assert reader.get_str("A") == "value"
        assert reader.get_str("EMPTY", "fallback") == "fallback"
        assert reader.get_str("MISSING") is None

    def test_int(self):
        reader = EnvReader(env={"N": "5", "BAD": "five"})
        assert reader.get_int("N", 3) == 5
        assert reader.get_int("BAD", 3) == 3
        assert reader.get_int("MISSING", 3) == 3

    def test_float(self):
        reader = EnvReader(env={"F": "2.5", "BAD": "x"})
        assert reader.get_float("F") == 2.5
        assert reader.get_float("BAD", 1.0) == 1.0

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("1", True), ("YES", True), ("on", True), ("no", False)],
    )
    def test_bool(self, raw, expected):
        assert EnvReader(env={"B": raw}).get_bool("B") is expected

    def test_path_expands_user(self):
        path = EnvReader(env={"P": "~/media"}).get_path("P")
        assert path == Path("~/media").expanduser()

    def test_defaults_to_os_environ(self, monkeypatch):
        monkeypatch.setenv("MCO_TEST_VALUE", "from-os")
        assert EnvReader().get_str("MCO_TEST_VALUE") == "from-os"
