"""Credential Policy — tests for password strength and user name rules."""

import pytest

from doconnect.core.errors import InvalidArgumentError
from doconnect.core.password_policy import (
    enforce_password_policy, enforce_user_name_rules, password_violations,
)


def test_strong_password_has_no_violations():
    assert password_violations("Passw0rd") == []


def test_every_failed_rule_reported():
    violations = password_violations("abc")
    assert len(violations) == 3  # length, digit, uppercase


def test_missing_lowercase_reported():
    assert password_violations("ABC123") == [
        "Passwords must have at least one lowercase ('a'-'z').",
    ]


def test_enforce_raises_with_field():
    with pytest.raises(InvalidArgumentError) as exc:
        enforce_password_policy("short")
    assert exc.value.field == "password"
    assert "at least 6 characters" in exc.value.message


@pytest.mark.parametrize("name", ["alice", "a.b-c_d", "me@host", "x+y", "User42"])
def test_valid_user_names(name):
    enforce_user_name_rules(name)


@pytest.mark.parametrize("name", ["has space", "semi;colon", "slash/name"])
def test_invalid_user_names(name):
    with pytest.raises(InvalidArgumentError):
        enforce_user_name_rules(name)
