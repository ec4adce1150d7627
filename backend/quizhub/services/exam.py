"""Exam workflow: create, view and answer questions, complete, delete."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from quizhub.common.object_id import normalize_object_id
from quizhub.common.pagination import CursorPaginationParams, Page, paginate
from quizhub.core.app_exceptions import (
    CategoryNotApprovedError,
    CategoryWithoutApprovedQuestionsError,
    ExamCompletedError,
    ExamNotFoundError,
    ExamQuestionAnswerTypeError,
    ExamQuestionNumberNotFoundError,
    ExamTakenError,
    ValidatorError,
)
from quizhub.core.logging import get_logger
from quizhub.core.permissions import Permission
from quizhub.events.dispatcher import EventDispatcher
from quizhub.events.types import Event
from quizhub.models.base import ApprovalStatus, utcnow
from quizhub.models.exam import Exam, ExamQuestion
from quizhub.models.question import Question, QuestionType
from quizhub.models.user import User
from quizhub.schemas.exam import ExamCreate, ExamListQuery, ExamQuestionAnswerCreate
from quizhub.services.authorization import AuthorizationVerifier
from quizhub.services.category import CategoryProvider
from quizhub.services.question import QuestionProvider

logger = get_logger(__name__)


@dataclass
class ExamQuestionView:
    """A snapshot question as seen by the exam taker."""

    exam: Exam
    number: int
    question: Question
    choices: list[str] | None
    choice: int | None
    answer: str | None


def normalize_answer(value: str) -> str:
    return " ".join(value.split()).casefold()


def is_correct(question: Question, snapshot: ExamQuestion) -> bool:
    """Whether the recorded choice or answer is a correct one."""
    if question.type == QuestionType.CHOICE:
        choices = question.choices or []
        return snapshot.choice is not None and 0 <= snapshot.choice < len(choices) and bool(
            choices[snapshot.choice].get("correct")
        )
    if snapshot.answer is None:
        return False
    answer = normalize_answer(snapshot.answer)
    return any(
        answer in {normalize_answer(variant) for variant in option.get("variants", [])}
        for option in question.answers or []
        if option.get("correct", True)
    )


class ExamProvider:
    """Fetch-by-id over non-deleted exams."""

    def __init__(self, db: Session, verifier: AuthorizationVerifier):
        self.db = db
        self.verifier = verifier

    def get_exam(self, exam_id: str, initiator: User | None = None) -> Exam:
        """
        Get an exam by id; with an initiator, also require getExam or ownership.

        Raises:
            ValidatorError: If the id is malformed
            ExamNotFoundError: If absent or soft-deleted
            AuthorizationFailedError: If the initiator may not see it
        """
        exam_id = normalize_object_id(exam_id)
        exam = self.db.execute(
            select(Exam).where(Exam.id == exam_id, Exam.deleted_at.is_(None))
        ).scalar_one_or_none()
        if exam is None:
            raise ExamNotFoundError(exam_id)
        if initiator is not None:
            self.verifier.verify_authorization(initiator, Permission.GET_EXAM, exam)
        return exam


class ExamService:
    """Exam use cases."""

    def __init__(
        self,
        db: Session,
        verifier: AuthorizationVerifier,
        dispatcher: EventDispatcher,
        provider: ExamProvider | None = None,
        category_provider: CategoryProvider | None = None,
        question_provider: QuestionProvider | None = None,
    ):
        self.db = db
        self.verifier = verifier
        self.dispatcher = dispatcher
        self.provider = provider or ExamProvider(db, verifier)
        self.category_provider = category_provider or CategoryProvider(db)
        self.question_provider = question_provider or QuestionProvider(db)

    def _find_active_exam(self, category_id: str, user_id: str) -> Exam | None:
        return self.db.execute(
            select(Exam).where(
                Exam.category_id == category_id,
                Exam.owner_id == user_id,
                Exam.completed_at.is_(None),
                Exam.deleted_at.is_(None),
            )
        ).scalars().first()

    @staticmethod
    def _snapshot_at(exam: Exam, number: int) -> ExamQuestion:
        if not 0 <= number < len(exam.questions):
            raise ExamQuestionNumberNotFoundError(number)
        return exam.questions[number]

    @staticmethod
    def _verify_not_completed(exam: Exam) -> None:
        if exam.is_completed:
            raise ExamCompletedError(exam.id)

    async def create_exam(self, data: ExamCreate, initiator: User) -> Exam:
        """
        Start an exam over a snapshot of the category's approved questions.

        Raises:
            AuthorizationFailedError: Without createExam
            CategoryNotFoundError: Unknown category
            CategoryNotApprovedError: Category still pending
            CategoryWithoutApprovedQuestionsError: Nothing to ask
            ExamTakenError: An exam for this category is already in progress
        """
        self.verifier.verify_authorization(initiator, Permission.CREATE_EXAM)
        category = self.category_provider.get_category(data.category_id)

        if not category.is_approved:
            raise CategoryNotApprovedError(category.id)
        if category.approved_question_count < 1:
            raise CategoryWithoutApprovedQuestionsError(category.id)

        active = self._find_active_exam(category.id, initiator.id)
        if active is not None:
            raise ExamTakenError(active.id)

        question_ids = self.db.execute(
            select(Question.id)
            .where(
                Question.category_id == category.id,
                Question.approval_status == ApprovalStatus.APPROVED,
                Question.deleted_at.is_(None),
            )
            .order_by(Question.created_at, Question.id)
        ).scalars().all()
        if not question_ids:
            raise CategoryWithoutApprovedQuestionsError(category.id)

        exam = Exam(
            category_id=category.id,
            creator_id=initiator.id,
            owner_id=initiator.id,
            question_number=0,
            questions=[
                ExamQuestion(position=position, question_id=question_id)
                for position, question_id in enumerate(question_ids)
            ],
        )
        self.db.add(exam)
        self.db.commit()
        logger.info(
            "Exam created",
            extra={"exam_id": exam.id, "category_id": category.id, "question_count": len(question_ids)},
        )

        await self.dispatcher.dispatch(self.db, Event.EXAM_CREATED, {"exam": exam, "user": initiator})
        return exam

    async def get_exam(self, exam_id: str, initiator: User) -> Exam:
        return self.provider.get_exam(exam_id, initiator)

    async def get_exam_question(self, exam_id: str, number: int, initiator: User) -> ExamQuestionView:
        """
        Return one snapshot question with the recorded answer.

        The owner's request moves the exam's question_number cursor to ``number``.

        Raises:
            AuthorizationFailedError: Without getExamQuestion and not the owner
            ExamQuestionNumberNotFoundError: No question at ``number``
        """
        exam = self.provider.get_exam(exam_id)
        self.verifier.verify_authorization(initiator, Permission.GET_EXAM_QUESTION, exam)
        view = self._view(exam, number)

        if exam.owner_id == initiator.id and exam.question_number != number:
            exam.question_number = number
            exam.updated_at = utcnow()
            self.db.commit()
        return view

    async def get_current_exam_question(self, exam_id: str, initiator: User) -> ExamQuestionView:
        """The question at the exam's cursor."""
        exam = self.provider.get_exam(exam_id)
        self.verifier.verify_authorization(initiator, Permission.GET_EXAM_QUESTION, exam)
        return self._view(exam, exam.question_number)

    def _view(self, exam: Exam, number: int) -> ExamQuestionView:
        snapshot = self._snapshot_at(exam, number)
        question = self.question_provider.get_question(snapshot.question_id, include_deleted=True)
        choices = None
        if question.type == QuestionType.CHOICE:
            choices = [choice["title"] for choice in question.choices or []]
        return ExamQuestionView(
            exam=exam,
            number=number,
            question=question,
            choices=choices,
            choice=snapshot.choice,
            answer=snapshot.answer,
        )

    async def create_exam_question_answer(
        self,
        exam_id: str,
        number: int,
        data: ExamQuestionAnswerCreate,
        initiator: User,
    ) -> ExamQuestionView:
        """
        Record a choice (choice questions) or a typed answer (type questions).

        Raises:
            AuthorizationFailedError: Without createExamQuestionAnswer and not the owner
            ExamCompletedError: The exam is already completed
            ExamQuestionNumberNotFoundError: No question at ``number``
            ExamQuestionAnswerTypeError: Answer shape does not match the question type
            ValidatorError: Choice index outside the question's choices
        """
        exam = self.provider.get_exam(exam_id)
        self.verifier.verify_authorization(initiator, Permission.CREATE_EXAM_QUESTION_ANSWER, exam)
        self._verify_not_completed(exam)

        snapshot = self._snapshot_at(exam, number)
        question = self.question_provider.get_question(snapshot.question_id, include_deleted=True)

        if question.type == QuestionType.CHOICE:
            if data.choice is None:
                raise ExamQuestionAnswerTypeError(question.type.value)
            choice_count = len(question.choices or [])
            if not 0 <= data.choice < choice_count:
                raise ValidatorError(
                    f"choice must be between 0 and {choice_count - 1}",
                    details=[{"field": "choice", "value": data.choice}],
                )
            snapshot.choice = data.choice
        else:
            if data.answer is None:
                raise ExamQuestionAnswerTypeError(question.type.value)
            snapshot.answer = data.answer

        exam.updated_at = utcnow()
        self.db.commit()
        return self._view(exam, number)

    async def delete_exam_question_answer(self, exam_id: str, number: int, initiator: User) -> ExamQuestionView:
        exam = self.provider.get_exam(exam_id)
        self.verifier.verify_authorization(initiator, Permission.DELETE_EXAM_QUESTION_ANSWER, exam)
        self._verify_not_completed(exam)

        snapshot = self._snapshot_at(exam, number)
        snapshot.choice = None
        snapshot.answer = None
        exam.updated_at = utcnow()
        self.db.commit()
        return self._view(exam, number)

    async def create_exam_completion(self, exam_id: str, initiator: User) -> Exam:
        """
        Complete an exam and count its correct answers.

        Raises:
            AuthorizationFailedError: Without createExamCompletion and not the owner
            ExamCompletedError: Already completed
        """
        exam = self.provider.get_exam(exam_id)
        self.verifier.verify_authorization(initiator, Permission.CREATE_EXAM_COMPLETION, exam)
        self._verify_not_completed(exam)

        # Grade against the snapshot, even if a question was deleted since
        question_ids = [snapshot.question_id for snapshot in exam.questions]
        questions = {
            question.id: question
            for question in self.db.execute(select(Question).where(Question.id.in_(question_ids))).scalars()
        }
        exam.correct_answer_count = sum(
            1
            for snapshot in exam.questions
            if snapshot.question_id in questions and is_correct(questions[snapshot.question_id], snapshot)
        )
        exam.completed_at = utcnow()
        exam.updated_at = exam.completed_at
        self.db.commit()
        logger.info(
            "Exam completed",
            extra={"exam_id": exam.id, "correct_answer_count": exam.correct_answer_count},
        )

        await self.dispatcher.dispatch(self.db, Event.EXAM_COMPLETED, {"exam": exam, "user": initiator})
        return exam

    async def delete_exam(self, exam_id: str, initiator: User) -> Exam:
        exam = self.provider.get_exam(exam_id)
        self.verifier.verify_authorization(initiator, Permission.DELETE_EXAM, exam)

        exam.soft_delete()
        self.db.commit()
        logger.info("Exam deleted", extra={"exam_id": exam.id, "user_id": initiator.id})

        await self.dispatcher.dispatch(self.db, Event.EXAM_DELETED, {"exam": exam, "user": initiator})
        return exam

    async def list_exams(
        self,
        query: ExamListQuery,
        params: CursorPaginationParams,
        initiator: User,
    ) -> Page[Exam]:
        """Exams visible to the initiator; only their own without getExam."""
        stmt = select(Exam).where(Exam.deleted_at.is_(None))
        if not self.verifier.has_permission(initiator, Permission.GET_EXAM):
            stmt = stmt.where(Exam.owner_id == initiator.id)
        if query.category_id:
            stmt = stmt.where(Exam.category_id == query.category_id)
        if query.completion is True:
            stmt = stmt.where(Exam.completed_at.is_not(None))
        elif query.completion is False:
            stmt = stmt.where(Exam.completed_at.is_(None))
        return paginate(self.db, stmt, Exam.id, params)

    async def list_current_exams(self, initiator: User) -> list[Exam]:
        """The initiator's exams in progress."""
        return list(
            self.db.execute(
                select(Exam)
                .where(Exam.owner_id == initiator.id, Exam.completed_at.is_(None), Exam.deleted_at.is_(None))
                .order_by(Exam.id.desc())
            ).scalars()
        )
