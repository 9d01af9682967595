"""Step progression for a learner inside a module.

A step is unlocked when it is the first one of the module or when the
previous step carries a progress row, whatever its correctness. Progress is
one row per (user, step) and every answer overwrites it.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from learnhub.crud import module_crud, step_crud
from learnhub.models.module.module_model import Module
from learnhub.models.module.step_model import ModuleStep, StepCheckpoint
from learnhub.models.progress.user_step_progress_model import UserStepProgress
from learnhub.schemas.module.step_schema import (
    CheckpointResult,
    CheckpointView,
    ContentBlockOut,
    ModuleWithSteps,
    StepProgressOut,
    StepView,
)
from learnhub.services.errors import NotFoundError
from learnhub.services.scoring import percentage

logger = logging.getLogger(__name__)


def compute_unlocked_flags(steps: list[ModuleStep], progress: dict[int, UserStepProgress]) -> list[bool]:
    """Return the unlock state of each ordered step."""
    flags: list[bool] = []
    for index in range(len(steps)):
        if index == 0:
            flags.append(True)
        else:
            flags.append(steps[index - 1].id in progress)
    return flags


def module_status(completed_steps: int, total_steps: int) -> str:
    if total_steps > 0 and completed_steps == total_steps:
        return "completed"
    if completed_steps > 0:
        return "in_progress"
    return "not_started"


class ProgressionService:
    """Per-learner view of a module and checkpoint submissions."""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_module_with_steps(self, module_id: int) -> ModuleWithSteps:
        module = module_crud.get_module_with_tree(self.db, module_id)
        if module is None:
            raise NotFoundError("Module not found", code="module_not_found")
        return self._build_view(module)

    def is_step_unlocked(self, step: ModuleStep) -> bool:
        steps = step_crud.get_module_steps(self.db, step.module_id)
        progress = step_crud.get_user_module_progress(self.db, self.user_id, [s.id for s in steps])
        for candidate, unlocked in zip(steps, compute_unlocked_flags(steps, progress)):
            if candidate.id == step.id:
                return unlocked
        return False

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def submit_step_checkpoint(
        self,
        step_id: int,
        selected_answer_index: int,
        checkpoint_id: Optional[int] = None,
    ) -> CheckpointResult:
        """Grade an answer against the step's first checkpoint and record it.

        ``checkpoint_id`` only selects which checkpoint's answer key and
        explanation are echoed back; grading always uses the first one.
        """
        checkpoints = step_crud.get_step_checkpoints(self.db, step_id)
        if not checkpoints:
            raise NotFoundError("No checkpoints found for this step", code="checkpoints_not_found")

        graded = checkpoints[0]
        correct = selected_answer_index == graded.correct_option_index

        step_crud.upsert_step_progress(
            self.db,
            self.user_id,
            step_id,
            selected_answer_index=selected_answer_index,
            is_correct=correct,
        )
        logger.info(
            "Checkpoint answered: user=%s step=%s selected=%s correct=%s",
            self.user_id,
            step_id,
            selected_answer_index,
            correct,
        )

        feedback = self._feedback_checkpoint(checkpoints, checkpoint_id)
        return CheckpointResult(
            correct=correct,
            unlock_next=True,
            correct_answer_index=feedback.correct_option_index,
            explanation=feedback.explanation,
        )

    def mark_step_complete(self, step_id: int) -> UserStepProgress:
        if step_crud.get_step(self.db, step_id) is None:
            raise NotFoundError("Step not found", code="step_not_found")

        progress = step_crud.upsert_step_progress(self.db, self.user_id, step_id)
        logger.info("Step completed: user=%s step=%s", self.user_id, step_id)
        return progress

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _feedback_checkpoint(
        checkpoints: list[StepCheckpoint], checkpoint_id: Optional[int]
    ) -> StepCheckpoint:
        if checkpoint_id is not None:
            for checkpoint in checkpoints:
                if checkpoint.id == checkpoint_id:
                    return checkpoint
        return checkpoints[0]

    def _build_view(self, module: Module) -> ModuleWithSteps:
        steps = list(module.steps)
        progress = step_crud.get_user_module_progress(self.db, self.user_id, [s.id for s in steps])
        unlocked_flags = compute_unlocked_flags(steps, progress)

        views: list[StepView] = []
        completed_steps = 0
        total_correct = 0
        current_step_index: Optional[int] = None

        for index, (step, unlocked) in enumerate(zip(steps, unlocked_flags)):
            record = progress.get(step.id)
            completed = record is not None and record.completed_at is not None

            if completed:
                completed_steps += 1
                if record.is_correct:
                    total_correct += 1
            elif unlocked and current_step_index is None:
                current_step_index = index

            views.append(
                StepView(
                    id=step.id,
                    module_id=step.module_id,
                    title=step.title,
                    order=step.order,
                    checkpoint_required=step.checkpoint_required,
                    content_blocks=[ContentBlockOut.model_validate(b) for b in step.content_blocks],
                    checkpoints=self._checkpoint_views(step, record) if unlocked else None,
                    is_unlocked=unlocked,
                    is_completed=completed,
                    progress=StepProgressOut.model_validate(record) if record is not None else None,
                )
            )

        total_steps = len(steps)
        if current_step_index is None:
            current_step_index = total_steps - 1 if total_steps and completed_steps == total_steps else 0

        return ModuleWithSteps(
            id=module.id,
            title=module.title,
            description=module.description,
            image_url=module.image_url,
            published=module.published,
            steps=views,
            current_step_index=current_step_index,
            completed_steps=completed_steps,
            total_steps=total_steps,
            total_correct=total_correct,
            module_score=percentage(total_correct, total_steps) if total_steps > 0 else None,
            status=module_status(completed_steps, total_steps),
        )

    @staticmethod
    def _checkpoint_views(
        step: ModuleStep, record: Optional[UserStepProgress]
    ) -> list[CheckpointView]:
        answered = record is not None
        views: list[CheckpointView] = []
        for position, checkpoint in enumerate(step.checkpoints):
            view = CheckpointView(
                id=checkpoint.id,
                question=checkpoint.question,
                options=list(checkpoint.options or []),
                is_evaluated=checkpoint.is_evaluated,
                order=checkpoint.order,
            )
            if answered:
                view.correct_option_index = checkpoint.correct_option_index
                view.explanation = checkpoint.explanation
                # Only the first checkpoint is graded.
                if position == 0 and record.selected_answer_index is not None:
                    view.user_answer = record.selected_answer_index
                    view.was_correct = record.is_correct
            views.append(view)
        return views
