from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base_class import Base

if TYPE_CHECKING:
    from .module_model import Module
    from ..user.user_model import User


class Quiz(Base):
    """Final assessment closing a module (at most one per module)."""

    __tablename__ = "quizzes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("modules.id", ondelete="CASCADE"), unique=True, index=True, nullable=False
    )
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=70, server_default="70")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    module: Mapped["Module"] = relationship(back_populates="quiz")
    questions: Mapped[List["QuizQuestion"]] = relationship(
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.order",
    )
    attempts: Mapped[List["QuizAttempt"]] = relationship(
        back_populates="quiz",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Quiz(id={self.id}, module_id={self.module_id}, passing_score={self.passing_score})>"


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quiz_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    correct_option_index: Mapped[int] = mapped_column(Integer, nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    quiz: Mapped[Quiz] = relationship(back_populates="questions")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<QuizQuestion(id={self.id}, quiz_id={self.quiz_id}, order={self.order})>"


class QuizAttempt(Base):
    """Immutable record of one final-quiz submission."""

    __tablename__ = "quiz_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    quiz_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("modules.id", ondelete="CASCADE"), index=True, nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    answers: Mapped[List[int]] = mapped_column(JSON, nullable=False)
    inline_answers: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    inline_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quiz_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), index=True
    )

    user: Mapped["User"] = relationship(back_populates="quiz_attempts")
    quiz: Mapped[Quiz] = relationship(back_populates="attempts")
    module: Mapped["Module"] = relationship()

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            "<QuizAttempt(id={0}, user_id={1}, module_id={2}, score={3}, passed={4})>".format(
                self.id,
                self.user_id,
                self.module_id,
                self.score,
                self.passed,
            )
        )
