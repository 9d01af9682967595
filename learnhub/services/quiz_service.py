from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from learnhub.crud import quiz_crud
from learnhub.models.module.quiz_model import QuizQuestion
from learnhub.schemas.module.quiz_schema import InlineAnswer, QuizAttemptIn, QuizResult
from learnhub.services.errors import NotFoundError, ValidationFailedError
from learnhub.services.scoring import combine_scores, percentage

logger = logging.getLogger(__name__)


def score_quiz_answers(questions: Sequence[QuizQuestion], answers: Sequence[int]) -> int:
    """Percentage of answers matching the question keys, position by position."""
    correct = sum(
        1 for question, answer in zip(questions, answers) if answer == question.correct_option_index
    )
    return percentage(correct, len(questions))


def is_answer_index(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def score_inline_answers(inline_answers: Optional[Sequence[InlineAnswer]]) -> Optional[int]:
    """Share of inline checkpoint answers flagged correct, ``None`` without any."""
    if not inline_answers:
        return None
    correct = sum(1 for answer in inline_answers if answer.correct)
    return percentage(correct, len(inline_answers))


class QuizService:
    """Final quiz submissions for one learner."""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def submit_attempt(self, payload: QuizAttemptIn) -> QuizResult:
        if payload.answers is None or not all(is_answer_index(a) for a in payload.answers):
            raise ValidationFailedError(
                "answers must be a list of option indices", code="invalid_answers"
            )

        quiz = quiz_crud.get_quiz_by_id(self.db, payload.quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz not found", code="quiz_not_found")
        if quiz.module_id != payload.module_id:
            raise ValidationFailedError(
                "Quiz does not belong to this module", code="quiz_module_mismatch"
            )

        questions = quiz_crud.get_questions(self.db, quiz.id)
        if len(payload.answers) != len(questions):
            logger.warning(
                "Quiz %s rejected for user %s: %s answers for %s questions",
                quiz.id,
                self.user_id,
                len(payload.answers),
                len(questions),
            )
            raise ValidationFailedError(
                "Answer count doesn't match question count", code="answer_count_mismatch"
            )

        quiz_score = score_quiz_answers(questions, payload.answers)
        inline_score = score_inline_answers(payload.inline_answers)
        score = combine_scores(quiz_score, inline_score)
        passed = score >= quiz.passing_score

        inline_payload = (
            [answer.model_dump() for answer in payload.inline_answers]
            if payload.inline_answers
            else None
        )
        attempt = quiz_crud.create_attempt(
            self.db,
            user_id=self.user_id,
            quiz_id=quiz.id,
            module_id=quiz.module_id,
            score=score,
            passed=passed,
            answers=payload.answers,
            inline_answers=inline_payload,
            inline_score=inline_score,
            quiz_score=quiz_score,
        )
        logger.info(
            "Quiz attempt %s recorded: user=%s quiz=%s score=%s passed=%s",
            attempt.id,
            self.user_id,
            quiz.id,
            score,
            passed,
        )

        return QuizResult(
            score=score,
            quiz_score=quiz_score,
            inline_score=inline_score,
            passed=passed,
            answers=list(payload.answers),
            inline_answers=payload.inline_answers,
            passing_score=quiz.passing_score,
        )
