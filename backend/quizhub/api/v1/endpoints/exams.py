"""Exam endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from quizhub.common.pagination import CursorPaginatedResponse, CursorPaginationParams, cursor_pagination_params
from quizhub.core.dependencies import CurrentUser, ServicesDep, Services
from quizhub.schemas.exam import (
    ExamCreate,
    ExamListQuery,
    ExamOut,
    ExamQuestionAnswerCreate,
    ExamQuestionOut,
)
from quizhub.schemas.question import QuestionOut
from quizhub.services.exam import ExamQuestionView

router = APIRouter()


def present_exam_question(view: ExamQuestionView, services: Services, viewer) -> ExamQuestionOut:
    return ExamQuestionOut(
        exam_id=view.exam.id,
        number=view.number,
        question=QuestionOut.from_model(
            view.question, show_choices=services.questions.can_view_choices(view.question, viewer)
        ),
        choices=view.choices,
        choice=view.choice,
        answer=view.answer,
    )


@router.post("", response_model=ExamOut, status_code=status.HTTP_201_CREATED)
async def create_exam(current_user: CurrentUser, data: ExamCreate, services: ServicesDep):
    """Start an exam for an approved category."""
    return ExamOut.from_model(await services.exams.create_exam(data, current_user))


@router.get("", response_model=CursorPaginatedResponse[ExamOut])
async def list_exams(
    current_user: CurrentUser,
    services: ServicesDep,
    params: Annotated[CursorPaginationParams, Depends(cursor_pagination_params)],
    category_id: str | None = Query(None),
    completion: bool | None = Query(None, description="true: completed only, false: in progress only"),
):
    query = ExamListQuery(category_id=category_id, completion=completion)
    page = await services.exams.list_exams(query, params, current_user)
    return CursorPaginatedResponse.from_page(page, [ExamOut.from_model(e) for e in page.items])


@router.get("/{exam_id}", response_model=ExamOut)
async def get_exam(current_user: CurrentUser, exam_id: str, services: ServicesDep):
    return ExamOut.from_model(await services.exams.get_exam(exam_id, current_user))


@router.get("/{exam_id}/questions/{question_number}", response_model=ExamQuestionOut)
async def get_exam_question(current_user: CurrentUser, exam_id: str, question_number: int, services: ServicesDep):
    """Get one exam question; the owner's request moves the exam cursor."""
    view = await services.exams.get_exam_question(exam_id, question_number, current_user)
    return present_exam_question(view, services, current_user)


@router.post(
    "/{exam_id}/questions/{question_number}/answer",
    response_model=ExamQuestionOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_exam_question_answer(
    current_user: CurrentUser,
    exam_id: str,
    question_number: int,
    data: ExamQuestionAnswerCreate,
    services: ServicesDep,
):
    view = await services.exams.create_exam_question_answer(exam_id, question_number, data, current_user)
    return present_exam_question(view, services, current_user)


@router.post("/{exam_id}/completion", response_model=ExamOut, status_code=status.HTTP_201_CREATED)
async def create_exam_completion(current_user: CurrentUser, exam_id: str, services: ServicesDep):
    return ExamOut.from_model(await services.exams.create_exam_completion(exam_id, current_user))


@router.delete("/{exam_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exam(current_user: CurrentUser, exam_id: str, services: ServicesDep) -> Response:
    await services.exams.delete_exam(exam_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
