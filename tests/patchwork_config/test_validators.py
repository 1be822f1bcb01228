"""Tests for patchwork_config.validators module."""

import pytest

from patchwork_config.validators import (
    mask_secret,
    validate_circleci_token,
    validate_github_token,
    validate_non_empty,
    validate_positive_number,
)


class TestValidateNonEmpty:
    """Tests for validate_non_empty()."""

    def test_valid(self):
        assert validate_non_empty("x", "FIELD") == (True, None)

    def test_none(self):
        is_valid, error = validate_non_empty(None, "FIELD")
        assert not is_valid
        assert "FIELD is not set" in error

    def test_blank(self):
        is_valid, error = validate_non_empty("   ", "FIELD")
        assert not is_valid
        assert "empty" in error


class TestValidateGitHubToken:
    """Tests for validate_github_token()."""

    @pytest.mark.parametrize("prefix", ["ghp_", "github_pat_", "ghs_", "gho_", "ghu_"])
    def test_valid_prefixes(self, prefix):
        assert validate_github_token(prefix + "a" * 36) == (True, None)

    def test_wrong_prefix(self):
        is_valid, error = validate_github_token("token_" + "a" * 36)
        assert not is_valid
        assert "must start with" in error

    def test_too_short(self):
        is_valid, error = validate_github_token("ghp_abc")
        assert not is_valid
        assert "too short" in error

    def test_empty(self):
        assert validate_github_token("")[0] is False


class TestValidateCircleCIToken:
    """Tests for validate_circleci_token()."""

    def test_legacy_hex_token(self):
        assert validate_circleci_token("a1" * 20) == (True, None)

    def test_ccipat_token(self):
        assert validate_circleci_token("CCIPAT_" + "x" * 40) == (True, None)

    def test_short_ccipat_token(self):
        assert validate_circleci_token("CCIPAT_x")[0] is False

    @pytest.mark.parametrize("token", ["a1" * 19, "Z" * 40, ""])
    def test_invalid(self, token):
        assert validate_circleci_token(token)[0] is False


class TestValidatePositiveNumber:
    """Tests for validate_positive_number()."""

    @pytest.mark.parametrize("value", [1, 0.5, 120.0])
    def test_valid(self, value):
        assert validate_positive_number(value, "poll_interval") == (True, None)

    @pytest.mark.parametrize("value", [0, -1, "10", True])
    def test_invalid(self, value):
        assert validate_positive_number(value, "poll_interval")[0] is False

    def test_none(self):
        assert validate_positive_number(None, "max_wait")[0] is False
        assert validate_positive_number(None, "max_wait", allow_none=True) == (True, None)


class TestMaskSecret:
    """Tests for mask_secret()."""

    def test_masks_all_but_prefix(self):
        assert mask_secret("ghp_secret") == "ghp_******"

    def test_short_value(self):
        assert mask_secret("abc") == "***"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty(self, value):
        assert mask_secret(value) == "[EMPTY]"
