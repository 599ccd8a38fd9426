"""
Unit tests for input validators, username generation and OTP codes.
"""

import re
import pytest
from datetime import datetime, timedelta

from app.core import validators
from app.core.otp import generate_otp_code, otp_expiry
from app.core.validators import (
    generate_default_username,
    generate_unique_username,
    is_username_exists,
    validate_email,
    validate_password,
    validate_username,
)


class TestValidateEmail:

    @pytest.mark.parametrize("email", [
        "a@b.c",
        "alice@example.com",
        "first.last+tag@sub.example.org",
    ])
    def test_accepts(self, email):
        assert validate_email(email) is True

    @pytest.mark.parametrize("email", [
        "",
        None,
        "plainaddress",
        "a@b",
        "a b@example.com",
        "a@@example.com",
        "alice@example.com\n",
    ])
    def test_rejects(self, email):
        assert validate_email(email) is False


class TestValidateUsername:

    @pytest.mark.parametrize("username", ["ab", "valid_name_1", "张三", "用户_01", "a" * 20])
    def test_accepts(self, username):
        assert validate_username(username) is True

    @pytest.mark.parametrize("username", ["", None, "a", "a" * 21, "bad-name", "has space", "émile"])
    def test_rejects(self, username):
        assert validate_username(username) is False


class TestValidatePassword:

    def test_minimum_length(self):
        assert validate_password("123456") is True
        assert validate_password("12345") is False

    def test_empty(self):
        assert validate_password("") is False
        assert validate_password(None) is False


class TestUsernameGeneration:

    def test_default_username_shape(self):
        username = generate_default_username("alice@example.com")

        assert re.fullmatch(r"user_alice_\d{4}", username)

    @pytest.mark.parametrize("email", [
        "first.last@example.com",
        "a+tag@example.com",
        "averyveryverylonglocalpart@example.com",
        "张三李四王五赵六钱七孙八@example.com",
        "...@example.com",
    ])
    def test_default_username_passes_validation(self, email):
        username = generate_default_username(email)

        assert validate_username(username), username

    def test_dots_are_dropped(self, monkeypatch):
        monkeypatch.setattr(validators, "_timestamp_suffix", lambda: "1234")

        assert generate_default_username("first.last@example.com") == "user_firstlast_1234"

    def test_counter_suffix_stays_within_limit(self, db_session, monkeypatch):
        monkeypatch.setattr(validators, "_timestamp_suffix", lambda: "1234")
        taken = {generate_default_username("averyveryverylonglocalpart@example.com")}
        monkeypatch.setattr(validators, "is_username_exists", lambda db, name, exclude_user_id=None: name in taken)

        username = generate_unique_username(db_session, "averyveryverylonglocalpart@example.com")

        assert username.endswith("_1234_1")
        assert validate_username(username)

    def test_unique_username_when_free(self, db_session):
        username = generate_unique_username(db_session, "alice@example.com")

        assert username.startswith("user_alice_")
        assert not is_username_exists(db_session, username)

    def test_unique_username_skips_taken(self, db_session, monkeypatch):
        taken = {"user_alice_1234"}
        monkeypatch.setattr(validators, "_timestamp_suffix", lambda: "1234")
        monkeypatch.setattr(validators, "is_username_exists", lambda db, name, exclude_user_id=None: name in taken)

        assert generate_unique_username(db_session, "alice@example.com") == "user_alice_1234_1"

    def test_falls_back_to_random_username(self, db_session, monkeypatch):
        monkeypatch.setattr(validators, "is_username_exists", lambda db, name, exclude_user_id=None: True)

        username = generate_unique_username(db_session, "alice@example.com")

        assert re.fullmatch(r"user_[0-9a-z]+_[0-9a-f]{6}", username)

    def test_is_username_exists_excludes_owner(self, db_session, make_user):
        user = make_user()

        assert is_username_exists(db_session, "alice") is True
        assert is_username_exists(db_session, "alice", exclude_user_id=user.id) is False


class TestOTPCodes:

    def test_code_format(self):
        for _ in range(200):
            code = generate_otp_code()
            assert re.fullmatch(r"[1-9]\d{5}", code)
            assert 100000 <= int(code) <= 999999

    def test_expiry_is_ten_minutes(self):
        now = datetime(2024, 1, 1, 12, 0, 0)

        assert otp_expiry(now) == now + timedelta(minutes=10)
