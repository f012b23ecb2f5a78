"""Password hashing and strength tests."""

from __future__ import annotations

import pytest

from lexistep.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestHashing:
    def test_hash_is_argon2id(self):
        assert hash_password("correct horse").startswith("$argon2id$")

    def test_hashes_are_salted(self):
        assert hash_password("correct horse") != hash_password("correct horse")

    def test_verify_roundtrip(self):
        h = hash_password("correct horse")
        assert verify_password("correct horse", h) is True
        assert verify_password("wrong horse", h) is False

    def test_verify_invalid_hash_returns_false(self):
        assert verify_password("anything", "not-a-hash") is False


class TestStrength:
    def test_accepts_eight_characters(self):
        validate_password_strength("abcdefgh")

    @pytest.mark.parametrize("password", ["", "        ", "short", "a" * 129])
    def test_rejects(self, password):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength(password)
