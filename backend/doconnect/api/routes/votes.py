"""Voting Routes — toggle a vote, read a target's tally."""

from fastapi import APIRouter, Depends, Query

from doconnect.api.dependencies import (
    get_current_user, get_current_user_optional, get_vote_service,
)
from doconnect.models.user import User
from doconnect.schemas.vote import VoteRequest, VoteStats
from doconnect.services.vote_service import VoteService

router = APIRouter(prefix="/api/v1/voting", tags=["voting"])


@router.post("", response_model=VoteStats)
async def cast_vote(
    body: VoteRequest,
    user: User = Depends(get_current_user),
    service: VoteService = Depends(get_vote_service),
):
    """Same type again removes the vote, the other type flips it."""
    return await service.cast(user, body)


@router.get("/stats", response_model=VoteStats)
async def vote_stats(
    question_id: int | None = Query(None),
    answer_id: int | None = Query(None),
    viewer: User | None = Depends(get_current_user_optional),
    service: VoteService = Depends(get_vote_service),
):
    return await service.stats(question_id, answer_id, viewer.id if viewer else None)
