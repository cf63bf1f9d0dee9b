"""Vote Schemas — toggle request and tally response."""

from pydantic import BaseModel

from doconnect.core.domain_types import VoteType


class VoteRequest(BaseModel):
    """Exactly one of question_id / answer_id (checked by core/enforce_votes.py)."""
    question_id: int | None = None
    answer_id: int | None = None
    type: VoteType


class VoteStats(BaseModel):
    up_votes: int
    down_votes: int
    net_votes: int
    user_vote: VoteType | None = None
