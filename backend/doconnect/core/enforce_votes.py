"""Vote Rules — pure toggle decision and vote tally.

Invariants:
    - A user holds at most one vote per target (question XOR answer)
    - Same type again removes the vote; the other type flips it; none inserts
    - decide_vote_action and compute_vote_stats are PURE: the shell applies the mutation

Design Decisions:
    - Tally takes (user_id, VoteType) pairs rather than ORM rows so it stays IO-free
"""

from collections.abc import Iterable

from doconnect.core.domain_types import VoteAction, VoteType
from doconnect.core.errors import InvalidArgumentError


def validate_vote_target(question_id: int | None, answer_id: int | None) -> None:
    """Exactly one of question_id / answer_id must be given."""
    if question_id is None and answer_id is None:
        raise InvalidArgumentError(
            "Either question_id or answer_id must be provided", "question_id",
        )
    if question_id is not None and answer_id is not None:
        raise InvalidArgumentError(
            "A vote targets a question or an answer, not both", "answer_id",
        )


def decide_vote_action(
    existing: VoteType | None, requested: VoteType,
) -> VoteAction:
    if existing is None:
        return VoteAction.INSERT
    if existing == requested:
        return VoteAction.REMOVE
    return VoteAction.FLIP


def compute_vote_stats(
    votes: Iterable[tuple[int, VoteType]], user_id: int | None = None,
) -> dict:
    """Tally up/down votes and pick out the caller's own vote."""
    up_votes = 0
    down_votes = 0
    user_vote: VoteType | None = None
    for voter_id, vote_type in votes:
        if vote_type == VoteType.UPVOTE:
            up_votes += 1
        else:
            down_votes += 1
        if user_id is not None and voter_id == user_id:
            user_vote = vote_type
    return {
        "up_votes": up_votes,
        "down_votes": down_votes,
        "net_votes": up_votes - down_votes,
        "user_vote": user_vote,
    }
