from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from learnhub.models.module.quiz_model import Quiz, QuizAttempt, QuizQuestion


def get_quiz_by_id(db: Session, quiz_id: int) -> Optional[Quiz]:
    return db.get(Quiz, quiz_id)


def get_quiz_for_module(db: Session, module_id: int) -> Optional[Quiz]:
    return db.query(Quiz).filter(Quiz.module_id == module_id).first()


def get_questions(db: Session, quiz_id: int) -> list[QuizQuestion]:
    return (
        db.query(QuizQuestion)
        .filter(QuizQuestion.quiz_id == quiz_id)
        .order_by(QuizQuestion.order.asc(), QuizQuestion.id.asc())
        .all()
    )


def create_attempt(
    db: Session,
    *,
    user_id: int,
    quiz_id: int,
    module_id: int,
    score: int,
    passed: bool,
    answers: list[int],
    inline_answers: Optional[list[dict[str, Any]]] = None,
    inline_score: Optional[int] = None,
    quiz_score: Optional[int] = None,
) -> QuizAttempt:
    attempt = QuizAttempt(
        user_id=user_id,
        quiz_id=quiz_id,
        module_id=module_id,
        score=score,
        passed=passed,
        answers=list(answers),
        inline_answers=inline_answers,
        inline_score=inline_score,
        quiz_score=quiz_score,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    return attempt


def _newest_first(query):
    # ``created_at`` has second precision on SQLite; the id breaks ties.
    return query.order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())


def get_attempts_by_user(db: Session, user_id: int) -> list[QuizAttempt]:
    return _newest_first(db.query(QuizAttempt).filter(QuizAttempt.user_id == user_id)).all()


def get_last_attempt(db: Session, user_id: int, module_id: int) -> Optional[QuizAttempt]:
    return _newest_first(
        db.query(QuizAttempt).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.module_id == module_id,
        )
    ).first()


def get_last_attempts_by_module(db: Session, user_id: int) -> dict[int, QuizAttempt]:
    """Latest attempt of the user for every module attempted, keyed by module id."""
    latest: dict[int, QuizAttempt] = {}
    for attempt in get_attempts_by_user(db, user_id):
        latest.setdefault(attempt.module_id, attempt)
    return latest


def _with_details(query):
    return query.options(joinedload(QuizAttempt.user), joinedload(QuizAttempt.module))


def get_all_attempts(db: Session, limit: Optional[int] = None) -> list[QuizAttempt]:
    query = _newest_first(_with_details(db.query(QuizAttempt)))
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_attempts_by_module(db: Session, module_id: int) -> list[QuizAttempt]:
    return _newest_first(
        _with_details(db.query(QuizAttempt)).filter(QuizAttempt.module_id == module_id)
    ).all()


def count_attempts(db: Session, *, passed_only: bool = False) -> int:
    query = db.query(func.count(QuizAttempt.id))
    if passed_only:
        query = query.filter(QuizAttempt.passed.is_(True))
    return int(query.scalar() or 0)
