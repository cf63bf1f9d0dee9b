"""Answer Routes — approved answers per question, authoring own answers (multipart)."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from doconnect.api.dependencies import get_answer_service, get_current_user
from doconnect.models.user import User
from doconnect.schemas.answer import (
    AnswerListResponse, AnswerResponse, AnswerText, AnswerWithQuestionResponse,
)
from doconnect.services.answer_service import AnswerService

router = APIRouter(prefix="/api/v1/answers", tags=["answers"])

@router.get("/question/{question_id}", response_model=AnswerListResponse)
async def list_answers_for_question(
    question_id: int,
    page: int = Query(1),
    page_size: int = Query(10),
    service: AnswerService = Depends(get_answer_service),
):
    return await service.list_for_question(question_id, page, page_size)


@router.get("/my", response_model=list[AnswerWithQuestionResponse])
async def my_answers(
    user: User = Depends(get_current_user),
    service: AnswerService = Depends(get_answer_service),
):
    return await service.list_for_user(user.id)


@router.post("", response_model=AnswerResponse, status_code=status.HTTP_201_CREATED)
async def create_answer(
    question_id: Annotated[int, Form()],
    content: Annotated[AnswerText, Form()],
    files: list[UploadFile] | None = File(None),
    user: User = Depends(get_current_user),
    service: AnswerService = Depends(get_answer_service),
):
    return await service.create(user, question_id, content, files)


@router.put("/{answer_id}", response_model=AnswerResponse)
async def update_answer(
    answer_id: int,
    content: Annotated[AnswerText, Form()],
    files: list[UploadFile] | None = File(None),
    user: User = Depends(get_current_user),
    service: AnswerService = Depends(get_answer_service),
):
    return await service.update(answer_id, user, content, files)


@router.delete("/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    user: User = Depends(get_current_user),
    service: AnswerService = Depends(get_answer_service),
):
    await service.delete(answer_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
