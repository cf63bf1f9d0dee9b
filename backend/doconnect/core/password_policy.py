"""Credential Policy — password strength and user name character rules.

Invariants:
    - Passwords: >= 6 chars, at least one digit, one uppercase, one lowercase letter
    - User names: only letters, digits and -._@+
    - All failed rules are reported together in one InvalidArgumentError
"""

import re

from doconnect.core.errors import InvalidArgumentError


MIN_PASSWORD_LENGTH = 6
_USER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9\-._@+]+$")


def password_violations(password: str) -> list[str]:
    violations = []
    if len(password) < MIN_PASSWORD_LENGTH:
        violations.append(
            f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.",
        )
    if not any(c.isdigit() for c in password):
        violations.append("Passwords must have at least one digit ('0'-'9').")
    if not any(c.isupper() for c in password):
        violations.append("Passwords must have at least one uppercase ('A'-'Z').")
    if not any(c.islower() for c in password):
        violations.append("Passwords must have at least one lowercase ('a'-'z').")
    return violations


def enforce_password_policy(password: str) -> None:
    violations = password_violations(password)
    if violations:
        raise InvalidArgumentError(" ".join(violations), "password")


def enforce_user_name_rules(user_name: str) -> None:
    if not _USER_NAME_PATTERN.match(user_name):
        raise InvalidArgumentError(
            f"Username '{user_name}' is invalid, can only contain letters or digits.",
            "user_name",
        )
