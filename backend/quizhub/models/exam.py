"""Exam models: an exam and its ordered question snapshot."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from quizhub.db.base import Base
from quizhub.models.base import EntityMixin


class Exam(EntityMixin, Base):
    """An attempt at a category's approved questions."""

    __tablename__ = "exams"

    category_id = Column(String(24), ForeignKey("categories.id"), nullable=False, index=True)
    question_number = Column(Integer, nullable=False, default=0)  # last requested question index
    correct_answer_count = Column(Integer, nullable=True)  # set on completion
    completed_at = Column(DateTime(timezone=True), nullable=True)

    questions = relationship(
        "ExamQuestion",
        back_populates="exam",
        order_by="ExamQuestion.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def answered_question_count(self) -> int:
        return sum(1 for question in self.questions if question.is_answered)


class ExamQuestion(Base):
    """Snapshot row: one question of an exam and the recorded answer."""

    __tablename__ = "exam_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_id = Column(String(24), ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    question_id = Column(String(24), ForeignKey("questions.id"), nullable=False)
    choice = Column(Integer, nullable=True)
    answer = Column(String(255), nullable=True)

    exam = relationship("Exam", back_populates="questions")

    @property
    def is_answered(self) -> bool:
        return self.choice is not None or self.answer is not None
