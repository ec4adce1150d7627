"""Rating marks: uniqueness, aggregates and per-user buckets."""

import pytest
from sqlalchemy import select

from quizhub.core.app_exceptions import CategoryRatedAlreadyError, QuestionRatedAlreadyError
from quizhub.models.activity import Activity
from quizhub.models.rating import RatingMark
from quizhub.services.rating import rating_mark_of
from tests.helpers.seed import create_category, create_question, create_test_user


class TestCategoryRating:
    async def test_aggregate_after_n_marks(self, db, services, root_user):
        category = create_category(db, root_user)
        marks = [5, 4, 2]
        for mark in marks:
            rater = create_test_user(db)
            await services.ratings.create_rating_mark(category, mark, rater)

        db.refresh(category)
        assert category.rating_mark_count == len(marks)
        assert category.rating_average_mark == pytest.approx(sum(marks) / len(marks))

    async def test_second_mark_conflicts(self, db, services, test_user, root_user):
        category = create_category(db, root_user)
        await services.ratings.create_rating_mark(category, 3, test_user)

        with pytest.raises(CategoryRatedAlreadyError) as exc_info:
            await services.ratings.create_rating_mark(category, 5, test_user)
        assert exc_info.value.status_code == 409
        assert len(db.execute(select(RatingMark)).scalars().all()) == 1

    async def test_unique_index_catches_a_missed_duplicate(self, db, services, monkeypatch, test_user, root_user):
        category = create_category(db, root_user)
        other = create_category(db, root_user)
        await services.ratings.create_rating_mark(category, 3, test_user)
        # A concurrent request that passed the lookup before the first mark was committed
        monkeypatch.setattr(services.ratings, "_find_rating_mark", lambda target, initiator: None)

        with pytest.raises(CategoryRatedAlreadyError):
            await services.ratings.create_rating_mark(category, 5, test_user)
        assert len(db.execute(select(RatingMark).where(RatingMark.category_id == category.id)).scalars().all()) == 1

        await services.ratings.create_rating_mark(other, 2, test_user)
        db.refresh(other)
        assert other.rating_mark_count == 1

    async def test_user_buckets_and_activity(self, db, services, test_user, root_user):
        first = create_category(db, root_user)
        second = create_category(db, root_user)
        await services.ratings.create_rating_mark(first, 4, test_user)
        await services.ratings.create_rating_mark(second, 1, test_user)

        db.refresh(test_user)
        assert test_user.category_rating_marks[3] == [first.id]
        assert test_user.category_rating_marks[0] == [second.id]
        assert rating_mark_of(test_user.category_rating_marks, first.id) == 4
        assert rating_mark_of(test_user.category_rating_marks, "f" * 24) is None

        events = db.execute(select(Activity.event)).scalars().all()
        assert events.count("categoryRated") == 2


class TestQuestionRating:
    async def test_rate_question(self, db, services, test_user, root_user):
        category = create_category(db, root_user)
        question = create_question(db, category, root_user)

        await services.ratings.create_rating_mark(question, 2, test_user)
        db.refresh(question)
        db.refresh(test_user)
        assert question.rating_mark_count == 1
        assert question.rating_average_mark == pytest.approx(2.0)
        assert rating_mark_of(test_user.question_rating_marks, question.id) == 2

        with pytest.raises(QuestionRatedAlreadyError):
            await services.ratings.create_rating_mark(question, 2, test_user)

    async def test_same_user_may_rate_category_and_question(self, db, services, test_user, root_user):
        category = create_category(db, root_user)
        question = create_question(db, category, root_user)

        await services.ratings.create_rating_mark(category, 5, test_user)
        await services.ratings.create_rating_mark(question, 5, test_user)
        assert len(db.execute(select(RatingMark)).scalars().all()) == 2
