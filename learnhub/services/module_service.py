from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from learnhub.crud import module_crud, quiz_crud
from learnhub.models.module.module_model import Module
from learnhub.models.module.quiz_model import QuizAttempt
from learnhub.models.user.user_model import User
from learnhub.schemas.module.module_schema import ModuleDetail, ModuleWithProgress
from learnhub.schemas.module.quiz_schema import QuizOut, QuizQuestionOut
from learnhub.services.errors import NotFoundError


def status_from_attempt(attempt: Optional[QuizAttempt]) -> str:
    """Module status as seen from the learner's most recent quiz attempt."""
    if attempt is None:
        return "not_started"
    return "completed" if attempt.passed else "in_progress"


class ModuleCatalogService:
    """Learner facing module listing, keyed on the final quiz attempts."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def list_modules_with_progress(self) -> list[ModuleWithProgress]:
        modules = module_crud.list_modules(self.db, include_unpublished=self.user.is_admin)
        latest = quiz_crud.get_last_attempts_by_module(self.db, self.user.id)
        return [self._with_progress(module, latest.get(module.id)) for module in modules]

    def get_module_with_progress(self, module_id: int) -> ModuleDetail:
        module = self.get_visible_module(module_id)
        attempt = quiz_crud.get_last_attempt(self.db, self.user.id, module.id)
        summary = self._with_progress(module, attempt)
        return ModuleDetail(**summary.model_dump(), quiz=self._quiz_view(module))

    def get_visible_module(self, module_id: int) -> Module:
        """Return the module, hiding unpublished ones from non-admins."""
        module = module_crud.get_module(self.db, module_id)
        if module is None or (not module.published and not self.user.is_admin):
            raise NotFoundError("Module not found", code="module_not_found")
        return module

    def get_attempt_history(self) -> list[QuizAttempt]:
        return quiz_crud.get_attempts_by_user(self.db, self.user.id)

    # ------------------------------------------------------------------
    @staticmethod
    def _with_progress(module: Module, attempt: Optional[QuizAttempt]) -> ModuleWithProgress:
        summary = ModuleWithProgress.model_validate(module)
        summary.status = status_from_attempt(attempt)
        summary.last_attempt_score = attempt.score if attempt is not None else None
        summary.question_count = len(module.quiz.questions) if module.quiz is not None else 0
        return summary

    def _quiz_view(self, module: Module) -> Optional[QuizOut]:
        quiz = module.quiz
        if quiz is None:
            return None
        reveal = self.user.is_admin
        return QuizOut(
            id=quiz.id,
            module_id=quiz.module_id,
            passing_score=quiz.passing_score,
            questions=[
                QuizQuestionOut(
                    id=question.id,
                    question=question.question,
                    options=list(question.options or []),
                    correct_option_index=question.correct_option_index if reveal else None,
                    order=question.order,
                )
                for question in quiz.questions
            ],
        )
