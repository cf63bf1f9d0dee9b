"""Question Routes — public browsing plus authoring of questions (multipart).

Invariants:
    - Form fields are stripped, then length-checked: title 10-200,
      content >= 20, topic 1-100
    - Static paths (/topics, /my) are declared before /{question_id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from doconnect.api.dependencies import (
    get_current_user, get_current_user_optional, get_question_service,
)
from doconnect.models.user import User
from doconnect.schemas.question import (
    TOPIC_MAX, QuestionDetailResponse, QuestionListResponse, QuestionResponse,
    QuestionText, TitleText, TopicCount, TopicText,
)
from doconnect.services.question_service import QuestionService

router = APIRouter(prefix="/api/v1/questions", tags=["questions"])


@router.get("", response_model=QuestionListResponse)
async def list_questions(
    search: str | None = Query(None, max_length=200),
    topic: str | None = Query(None, max_length=TOPIC_MAX),
    page: int = Query(1),
    page_size: int = Query(10),
    service: QuestionService = Depends(get_question_service),
):
    """Approved questions, newest first."""
    return await service.list_approved(search, topic, page, page_size)


@router.get("/topics", response_model=list[TopicCount])
async def list_topics(service: QuestionService = Depends(get_question_service)):
    return await service.topics()


@router.get("/my", response_model=list[QuestionResponse])
async def my_questions(
    user: User = Depends(get_current_user),
    service: QuestionService = Depends(get_question_service),
):
    return await service.list_for_user(user.id)


@router.get("/{question_id}", response_model=QuestionDetailResponse)
async def get_question(
    question_id: int,
    viewer: User | None = Depends(get_current_user_optional),
    service: QuestionService = Depends(get_question_service),
):
    return await service.get_detail(question_id, viewer)


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
    title: Annotated[TitleText, Form()],
    content: Annotated[QuestionText, Form()],
    topic: Annotated[TopicText, Form()],
    files: list[UploadFile] | None = File(None),
    user: User = Depends(get_current_user),
    service: QuestionService = Depends(get_question_service),
):
    return await service.create(user, title, content, topic, files)


@router.put("/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    title: Annotated[TitleText, Form()],
    content: Annotated[QuestionText, Form()],
    topic: Annotated[TopicText, Form()],
    files: list[UploadFile] | None = File(None),
    user: User = Depends(get_current_user),
    service: QuestionService = Depends(get_question_service),
):
    return await service.update(question_id, user, title, content, topic, files)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    user: User = Depends(get_current_user),
    service: QuestionService = Depends(get_question_service),
):
    await service.delete(question_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
