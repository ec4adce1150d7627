"""Exam lifecycle: create, navigate, answer, complete, delete."""

import pytest

from quizhub.common.pagination import CursorPaginationParams
from quizhub.core.app_exceptions import (
    AuthorizationFailedError,
    CategoryNotApprovedError,
    CategoryWithoutApprovedQuestionsError,
    ExamCompletedError,
    ExamNotFoundError,
    ExamQuestionAnswerTypeError,
    ExamQuestionNumberNotFoundError,
    ExamTakenError,
    ValidatorError,
)
from quizhub.models.question import QuestionType
from quizhub.schemas.exam import ExamCreate, ExamListQuery, ExamQuestionAnswerCreate
from quizhub.services.exam import normalize_answer
from tests.helpers.seed import create_category, create_exam_category, create_question


class TestCreateExam:
    async def test_snapshots_approved_questions(self, db, services, test_user, root_user):
        category, questions = create_exam_category(db, root_user, question_count=3)
        create_question(db, category, root_user, approved=False)

        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        assert exam.owner_id == test_user.id
        assert exam.question_number == 0
        assert exam.question_count == 3
        assert [snapshot.question_id for snapshot in exam.questions] == [q.id for q in questions]
        assert exam.correct_answer_count is None

        db.refresh(test_user)
        assert test_user.category_exams == {category.id: exam.id}

    async def test_category_without_approved_questions(self, db, services, test_user, root_user):
        category = create_category(db, root_user)
        create_question(db, category, root_user, approved=False)

        with pytest.raises(CategoryWithoutApprovedQuestionsError) as exc_info:
            await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)
        assert exc_info.value.status_code == 409

    async def test_pending_category(self, db, services, test_user):
        category = create_category(db, test_user, approved=False)
        create_question(db, category, test_user)

        with pytest.raises(CategoryNotApprovedError):
            await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

    async def test_second_active_exam_conflicts(self, db, services, test_user, other_user, root_user):
        category, _ = create_exam_category(db, root_user)
        first = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        with pytest.raises(ExamTakenError):
            await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        # Other users and completed exams do not block
        await services.exams.create_exam(ExamCreate(category_id=category.id), other_user)
        await services.exams.create_exam_completion(first.id, test_user)
        again = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)
        assert again.id != first.id


class TestExamQuestions:
    @pytest.fixture
    def exam_setup(self, db, root_user):
        return create_exam_category(db, root_user, question_count=3)

    async def test_viewing_question_moves_cursor(self, services, test_user, exam_setup):
        category, questions = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        view = await services.exams.get_exam_question(exam.id, 2, test_user)
        assert view.question.id == questions[2].id
        assert view.choices == ["Right", "Wrong"]
        assert exam.question_number == 2

        current = await services.exams.get_current_exam_question(exam.id, test_user)
        assert current.number == 2

        with pytest.raises(ExamQuestionNumberNotFoundError) as exc_info:
            await services.exams.get_exam_question(exam.id, 5, test_user)
        assert exc_info.value.status_code == 404
        assert exam.question_number == 2

    async def test_privileged_viewer_does_not_move_cursor(self, services, test_user, root_user, exam_setup):
        category, _ = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        await services.exams.get_exam_question(exam.id, 1, root_user)
        assert exam.question_number == 0

    async def test_stranger_cannot_see_exam(self, services, test_user, other_user, exam_setup):
        category, _ = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        with pytest.raises(AuthorizationFailedError):
            await services.exams.get_exam(exam.id, other_user)
        with pytest.raises(AuthorizationFailedError):
            await services.exams.get_exam_question(exam.id, 0, other_user)

    async def test_answer_and_complete(self, services, test_user, exam_setup):
        category, _ = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        await services.exams.create_exam_question_answer(exam.id, 0, ExamQuestionAnswerCreate(choice=0), test_user)
        await services.exams.create_exam_question_answer(exam.id, 1, ExamQuestionAnswerCreate(choice=1), test_user)
        view = await services.exams.create_exam_question_answer(
            exam.id, 2, ExamQuestionAnswerCreate(choice=0), test_user
        )
        assert view.choice == 0
        assert exam.answered_question_count == 3

        cleared = await services.exams.delete_exam_question_answer(exam.id, 2, test_user)
        assert cleared.choice is None
        assert exam.answered_question_count == 2

        completed = await services.exams.create_exam_completion(exam.id, test_user)
        assert completed.is_completed
        assert completed.correct_answer_count == 1

        with pytest.raises(ExamCompletedError):
            await services.exams.create_exam_question_answer(
                exam.id, 2, ExamQuestionAnswerCreate(choice=0), test_user
            )
        with pytest.raises(ExamCompletedError):
            await services.exams.create_exam_completion(exam.id, test_user)

    async def test_deleted_question_stays_in_snapshot(self, services, test_user, root_user, exam_setup):
        category, questions = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)
        await services.questions.delete_question(questions[1].id, root_user)

        view = await services.exams.get_exam_question(exam.id, 1, test_user)
        assert view.question.id == questions[1].id
        await services.exams.create_exam_question_answer(exam.id, 1, ExamQuestionAnswerCreate(choice=0), test_user)

        completed = await services.exams.create_exam_completion(exam.id, test_user)
        assert completed.correct_answer_count == 1

    async def test_choice_out_of_range(self, services, test_user, exam_setup):
        category, _ = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        with pytest.raises(ValidatorError):
            await services.exams.create_exam_question_answer(
                exam.id, 0, ExamQuestionAnswerCreate(choice=7), test_user
            )

    async def test_answer_shape_must_match_question_type(self, services, test_user, exam_setup):
        category, _ = exam_setup
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        with pytest.raises(ExamQuestionAnswerTypeError) as exc_info:
            await services.exams.create_exam_question_answer(
                exam.id, 0, ExamQuestionAnswerCreate(answer="paris"), test_user
            )
        assert exc_info.value.status_code == 400

    async def test_typed_answers_are_graded_by_variant(self, db, services, test_user, root_user):
        category = create_category(db, root_user)
        create_question(db, category, root_user, question_type=QuestionType.TYPE)
        create_question(db, category, root_user, question_type=QuestionType.TYPE)
        exam = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)

        await services.exams.create_exam_question_answer(
            exam.id, 0, ExamQuestionAnswerCreate(answer="  PARIS "), test_user
        )
        await services.exams.create_exam_question_answer(
            exam.id, 1, ExamQuestionAnswerCreate(answer="london"), test_user
        )
        completed = await services.exams.create_exam_completion(exam.id, test_user)
        assert completed.correct_answer_count == 1


class TestExamLists:
    async def test_delete_and_lists(self, db, services, test_user, other_user, root_user):
        category, _ = create_exam_category(db, root_user)
        other_category, _ = create_exam_category(db, root_user)
        mine = await services.exams.create_exam(ExamCreate(category_id=category.id), test_user)
        done = await services.exams.create_exam(ExamCreate(category_id=other_category.id), test_user)
        await services.exams.create_exam_completion(done.id, test_user)
        theirs = await services.exams.create_exam(ExamCreate(category_id=category.id), other_user)
        params = CursorPaginationParams()

        page = await services.exams.list_exams(ExamListQuery(), params, test_user)
        assert {e.id for e in page.items} == {mine.id, done.id}

        page = await services.exams.list_exams(ExamListQuery(completion=True), params, test_user)
        assert [e.id for e in page.items] == [done.id]

        page = await services.exams.list_exams(ExamListQuery(), params, root_user)
        assert {e.id for e in page.items} == {mine.id, done.id, theirs.id}

        current = await services.exams.list_current_exams(test_user)
        assert [e.id for e in current] == [mine.id]

        await services.exams.delete_exam(mine.id, test_user)
        with pytest.raises(ExamNotFoundError):
            await services.exams.get_exam(mine.id, test_user)
        db.refresh(test_user)
        assert test_user.category_exams == {}


def test_normalize_answer():
    assert normalize_answer("  New   York ") == "new york"
    assert normalize_answer("STRASSE") == normalize_answer("straße")
