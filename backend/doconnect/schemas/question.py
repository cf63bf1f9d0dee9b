"""Question Schemas — list items, detail view, topic counts.

Invariants:
    - Create/update input arrives as multipart form fields (files alongside);
      the field types below strip surrounding whitespace before checking length
    - QuestionDetailResponse carries only approved answers, oldest first
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints

from doconnect.schemas.answer import AnswerResponse
from doconnect.schemas.common import ImageResponse, UserSummary
from doconnect.schemas.vote import VoteStats

TITLE_MIN, TITLE_MAX = 10, 200
CONTENT_MIN = 20
TOPIC_MAX = 100

TitleText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=TITLE_MIN, max_length=TITLE_MAX),
]
QuestionText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=CONTENT_MIN)]
TopicText = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TOPIC_MAX),
]


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    topic: str
    status: str
    up_votes: int
    down_votes: int
    view_count: int
    answer_count: int
    created_at: datetime
    updated_at: datetime | None = None
    user: UserSummary
    images: list[ImageResponse] = []


class QuestionDetailResponse(QuestionResponse):
    answers: list[AnswerResponse]
    vote_stats: VoteStats


class QuestionListResponse(BaseModel):
    questions: list[QuestionResponse]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class TopicCount(BaseModel):
    topic: str
    count: int
