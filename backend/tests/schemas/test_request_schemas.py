"""Request schemas — normalization and field rules applied before services run."""

import pytest
from pydantic import ValidationError

from doconnect.core.domain_types import VoteType
from doconnect.schemas.admin import RoleAssignmentRequest, StatusUpdateRequest
from doconnect.schemas.auth import RegisterRequest
from doconnect.schemas.profile import ProfileUpdateRequest
from doconnect.schemas.vote import VoteRequest


def _register(**overrides) -> dict:
    data = {
        "first_name": "  Carol ",
        "last_name": "Danvers",
        "email": "Carol@Example.COM",
        "user_name": "carol",
        "password": "Passw0rd",
    }
    data.update(overrides)
    return data


def test_register_strips_names_and_lowercases_email():
    body = RegisterRequest(**_register())
    assert body.first_name == "Carol"
    assert body.email == "carol@example.com"


def test_register_rejects_blank_name():
    with pytest.raises(ValidationError):
        RegisterRequest(**_register(last_name="   "))


def test_register_rejects_malformed_email():
    with pytest.raises(ValidationError):
        RegisterRequest(**_register(email="carol-at-example"))


def test_register_leaves_password_rules_to_policy():
    assert RegisterRequest(**_register(password="x")).password == "x"


def test_profile_update_tracks_explicit_fields():
    body = ProfileUpdateRequest(bio=None, location="Porto")
    assert body.model_fields_set == {"bio", "location"}


def test_vote_request_type_limited_to_plus_minus_one():
    assert VoteRequest(question_id=1, type=-1).type is VoteType.DOWNVOTE
    with pytest.raises(ValidationError):
        VoteRequest(question_id=1, type=0)


def test_status_update_accepts_known_statuses_only():
    assert StatusUpdateRequest(status="rejected").status.value == "rejected"
    with pytest.raises(ValidationError):
        StatusUpdateRequest(status="archived")


def test_role_assignment_needs_a_role():
    with pytest.raises(ValidationError):
        RoleAssignmentRequest(roles=[])
