"""Authoring and back-office operations reserved to administrators."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from learnhub.crud import group_crud, module_crud, pathway_crud, quiz_crud, user_crud
from learnhub.models.module.module_model import Module
from learnhub.models.module.quiz_model import Quiz, QuizAttempt, QuizQuestion
from learnhub.models.module.step_model import (
    ModuleStep,
    StepCheckpoint,
    StepContentBlock,
)
from learnhub.models.pathway.pathway_model import (
    GroupPathwayAssignment,
    TrainingPathway,
    UserPathwayAssignment,
)
from learnhub.models.user.group_model import GroupMember, UserGroup
from learnhub.models.user.user_model import User, UserRole
from learnhub.schemas.admin.stats_schema import AdminStats
from learnhub.schemas.module.module_schema import ModuleCreate, ModuleUpdate
from learnhub.schemas.module.quiz_schema import QuizAttemptOut, QuizSaveIn
from learnhub.schemas.module.step_schema import CheckpointIn, ContentBlockIn, StepIn
from learnhub.schemas.pathway.pathway_schema import PathwayCreate, PathwayUpdate
from learnhub.schemas.user.group_schema import (
    GroupCreate,
    GroupDetail,
    GroupOut,
    GroupPathwayAssignmentOut,
    GroupUpdate,
)
from learnhub.schemas.user.user_schema import User as UserOut
from learnhub.schemas.user.user_schema import UserCreate, UserDetail, UserWithProgress
from learnhub.services.errors import ConflictError, NotFoundError, ValidationFailedError
from learnhub.services.scoring import percentage, round_half_up

logger = logging.getLogger(__name__)

RECENT_ATTEMPTS_LIMIT = 10
QUIZ_OPTION_COUNT = 4


class AdminService:
    def __init__(self, db: Session, admin: User):
        self.db = db
        self.admin = admin

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    def get_stats(self) -> AdminStats:
        total_attempts = quiz_crud.count_attempts(self.db)
        passed_attempts = quiz_crud.count_attempts(self.db, passed_only=True)
        return AdminStats(
            total_modules=module_crud.count_modules(self.db),
            published_modules=module_crud.count_modules(self.db, published_only=True),
            total_users=user_crud.count_users(self.db),
            total_attempts=total_attempts,
            pass_rate=percentage(passed_attempts, total_attempts),
            total_groups=group_crud.count_groups(self.db),
            total_pathways=pathway_crud.count_pathways(self.db),
        )

    def list_attempts(self, *, recent_only: bool = False) -> list[QuizAttempt]:
        limit = RECENT_ATTEMPTS_LIMIT if recent_only else None
        return quiz_crud.get_all_attempts(self.db, limit=limit)

    def list_module_attempts(self, module_id: int) -> list[QuizAttempt]:
        self._get_module(module_id)
        return quiz_crud.get_attempts_by_module(self.db, module_id)

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------
    def list_modules(self) -> list[Module]:
        return module_crud.list_modules(self.db, include_unpublished=True)

    def get_module_tree(self, module_id: int) -> Module:
        module = module_crud.get_module_with_tree(self.db, module_id)
        if module is None:
            raise NotFoundError("Module not found", code="module_not_found")
        return module

    def create_module(self, data: ModuleCreate) -> Module:
        module = module_crud.create_module(self.db, data)
        logger.info("Module %s created by admin %s", module.id, self.admin.id)
        return module

    def update_module(self, module_id: int, data: ModuleUpdate) -> Module:
        module = self._get_module(module_id)
        return module_crud.update_module(self.db, module, data)

    def delete_module(self, module_id: int) -> None:
        module = self._get_module(module_id)
        module_crud.delete_module(self.db, module)
        logger.info("Module %s deleted by admin %s", module_id, self.admin.id)

    def save_module_steps(self, module_id: int, steps: Sequence[StepIn]) -> list[ModuleStep]:
        """Replace the whole step tree of a module.

        Steps, blocks and checkpoints are renumbered from 1 in payload order.
        Steps absent from the payload are removed with their blocks,
        checkpoints and learner progress. A step without any checkpoint
        payload keeps its current checkpoints.
        """
        module = self.get_module_tree(module_id)

        for data in steps:
            for checkpoint in data.normalized_checkpoints() or []:
                if checkpoint.is_complete:
                    self._ensure_valid_option_index(
                        checkpoint.correct_option_index or 0, len(checkpoint.options)
                    )

        existing = {step.id: step for step in module.steps}
        kept_ids = {data.id for data in steps if data.id is not None}
        for step_id, step in existing.items():
            if step_id not in kept_ids:
                module.steps.remove(step)

        for index, data in enumerate(steps):
            step = existing.get(data.id) if data.id is not None else None
            if step is None:
                step = ModuleStep(title=data.title)
                module.steps.append(step)
            step.title = data.title
            step.order = index + 1
            step.checkpoint_required = data.checkpoint_required

            self._replace_blocks(step, data.content_blocks)

            checkpoints = data.normalized_checkpoints()
            if checkpoints is not None:
                self._replace_checkpoints(step, checkpoints)

        self.db.commit()
        logger.info("Saved %s steps for module %s", len(steps), module_id)
        return list(self.get_module_tree(module_id).steps)

    def save_module_quiz(self, module_id: int, payload: QuizSaveIn) -> Quiz:
        """Create or update the module quiz and replace its question list."""
        if not 1 <= payload.passing_score <= 100:
            raise ValidationFailedError("Invalid passing score", code="invalid_passing_score")
        module = self._get_module(module_id)

        for question in payload.questions:
            if question.is_complete:
                self._ensure_valid_option_index(question.correct_option_index, QUIZ_OPTION_COUNT)

        quiz = module.quiz
        if quiz is None:
            quiz = Quiz(passing_score=payload.passing_score)
            module.quiz = quiz
        quiz.passing_score = payload.passing_score

        existing = {question.id: question for question in quiz.questions}
        kept_ids = {question.id for question in payload.questions if question.id is not None}
        for question_id, question in existing.items():
            if question_id not in kept_ids:
                quiz.questions.remove(question)

        order = 0
        for data in payload.questions:
            # An incomplete question sent back with its id is kept as stored,
            # old order included, so it may share an order with a renumbered one.
            if not data.is_complete:
                continue
            order += 1
            question = existing.get(data.id) if data.id is not None else None
            if question is None:
                question = QuizQuestion(question=data.question, options=list(data.options))
                quiz.questions.append(question)
            question.question = data.question
            question.options = list(data.options)
            question.correct_option_index = data.correct_option_index
            question.order = order

        self.db.commit()
        self.db.refresh(quiz)
        logger.info("Saved quiz %s for module %s (%s questions)", quiz.id, module_id, order)
        return quiz

    def get_module_quiz(self, module_id: int) -> Optional[Quiz]:
        return self._get_module(module_id).quiz

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def list_users_with_progress(self) -> list[UserWithProgress]:
        return [self._user_with_progress(user) for user in user_crud.list_users(self.db)]

    def get_user_detail(self, user_id: int) -> UserDetail:
        user = self._get_user(user_id)
        summary = self._user_with_progress(user)
        attempts = quiz_crud.get_attempts_by_user(self.db, user.id)
        return UserDetail(
            **summary.model_dump(),
            attempts=[QuizAttemptOut.model_validate(attempt) for attempt in attempts],
        )

    def create_user(self, data: UserCreate) -> User:
        if user_crud.get_user_by_username(self.db, data.username):
            raise ConflictError("Username already exists", code="username_taken")
        if data.email and user_crud.get_user_by_email(self.db, data.email):
            raise ConflictError("Email already exists", code="email_taken")
        user = user_crud.create_user(self.db, data)
        logger.info("User %s created by admin %s", user.id, self.admin.id)
        return user

    def update_user_role(self, user_id: int, role: str) -> User:
        try:
            new_role = UserRole(role)
        except ValueError as exc:
            raise ValidationFailedError("Invalid role", code="invalid_role") from exc
        user = self._get_user(user_id)
        return user_crud.update_user_role(self.db, user, new_role)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------
    def list_groups(self) -> list[GroupOut]:
        return [self._group_out(group) for group in group_crud.list_groups(self.db)]

    def get_group_detail(self, group_id: int) -> GroupDetail:
        group = self._get_group(group_id)
        return GroupDetail(
            **self._group_out(group).model_dump(),
            members=[UserOut.model_validate(member.user) for member in group.members],
            pathway_assignments=[
                GroupPathwayAssignmentOut.model_validate(a) for a in group.pathway_assignments
            ],
        )

    def create_group(self, data: GroupCreate) -> GroupOut:
        return self._group_out(group_crud.create_group(self.db, data))

    def update_group(self, group_id: int, data: GroupUpdate) -> GroupOut:
        group = self._get_group(group_id)
        return self._group_out(group_crud.update_group(self.db, group, data))

    def delete_group(self, group_id: int) -> None:
        group_crud.delete_group(self.db, self._get_group(group_id))

    def add_group_member(self, group_id: int, user_id: int) -> GroupMember:
        self._get_group(group_id)
        self._get_user(user_id)
        return group_crud.add_member(self.db, group_id, user_id)

    def remove_group_member(self, group_id: int, user_id: int) -> None:
        self._get_group(group_id)
        group_crud.remove_member(self.db, group_id, user_id)

    # ------------------------------------------------------------------
    # Pathways
    # ------------------------------------------------------------------
    def list_pathways(self) -> list[TrainingPathway]:
        return pathway_crud.list_pathways(self.db)

    def get_pathway(self, pathway_id: int) -> TrainingPathway:
        pathway = pathway_crud.get_pathway(self.db, pathway_id)
        if pathway is None:
            raise NotFoundError("Pathway not found", code="pathway_not_found")
        return pathway

    def create_pathway(self, data: PathwayCreate) -> TrainingPathway:
        self._ensure_modules_exist(data.module_ids)
        pathway = pathway_crud.create_pathway(
            self.db,
            name=data.name,
            description=data.description,
            published=data.published,
            module_ids=data.module_ids,
        )
        return self.get_pathway(pathway.id)

    def update_pathway(self, pathway_id: int, data: PathwayUpdate) -> TrainingPathway:
        return pathway_crud.update_pathway(self.db, self.get_pathway(pathway_id), data)

    def delete_pathway(self, pathway_id: int) -> None:
        pathway_crud.delete_pathway(self.db, self.get_pathway(pathway_id))

    def set_pathway_modules(self, pathway_id: int, module_ids: Sequence[int]) -> TrainingPathway:
        pathway = self.get_pathway(pathway_id)
        self._ensure_modules_exist(module_ids)
        pathway_crud.replace_pathway_modules(self.db, pathway, module_ids)
        return self.get_pathway(pathway_id)

    def assign_pathway_to_group(self, pathway_id: int, group_id: int, due_date=None) -> GroupPathwayAssignment:
        self.get_pathway(pathway_id)
        self._get_group(group_id)
        return pathway_crud.assign_to_group(self.db, pathway_id, group_id, due_date)

    def assign_pathway_to_user(self, pathway_id: int, user_id: int, due_date=None) -> UserPathwayAssignment:
        self.get_pathway(pathway_id)
        self._get_user(user_id)
        return pathway_crud.assign_to_user(self.db, pathway_id, user_id, due_date)

    def unassign_pathway_from_group(self, pathway_id: int, group_id: int) -> None:
        pathway_crud.remove_group_assignment(self.db, pathway_id, group_id)

    def unassign_pathway_from_user(self, pathway_id: int, user_id: int) -> None:
        pathway_crud.remove_user_assignment(self.db, pathway_id, user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_module(self, module_id: int) -> Module:
        module = module_crud.get_module(self.db, module_id)
        if module is None:
            raise NotFoundError("Module not found", code="module_not_found")
        return module

    def _get_user(self, user_id: int) -> User:
        user = user_crud.get_user(self.db, user_id)
        if user is None:
            raise NotFoundError("User not found", code="user_not_found")
        return user

    def _get_group(self, group_id: int) -> UserGroup:
        group = group_crud.get_group(self.db, group_id)
        if group is None:
            raise NotFoundError("Group not found", code="group_not_found")
        return group

    def _ensure_modules_exist(self, module_ids: Sequence[int]) -> None:
        for module_id in module_ids:
            self._get_module(module_id)

    @staticmethod
    def _ensure_valid_option_index(index: int, option_count: int) -> None:
        if not 0 <= index < option_count:
            raise ValidationFailedError(
                "Correct option index is out of range", code="invalid_correct_option"
            )

    @staticmethod
    def _replace_blocks(step: ModuleStep, blocks: Sequence[ContentBlockIn]) -> None:
        existing = {block.id: block for block in step.content_blocks}
        kept_ids = {data.id for data in blocks if data.id is not None}
        for block_id, block in existing.items():
            if block_id not in kept_ids:
                step.content_blocks.remove(block)

        for index, data in enumerate(blocks):
            block = existing.get(data.id) if data.id is not None else None
            if block is None:
                block = StepContentBlock()
                step.content_blocks.append(block)
            block.block_type = data.block_type
            block.content = data.content or None
            block.image_url = data.image_url or None
            block.layout = data.layout.model_dump() if data.layout is not None else None
            block.order = index + 1

    @staticmethod
    def _replace_checkpoints(step: ModuleStep, checkpoints: Sequence[CheckpointIn]) -> None:
        step.checkpoints.clear()
        order = 0
        for data in checkpoints:
            if not data.is_complete:
                continue
            order += 1
            step.checkpoints.append(
                StepCheckpoint(
                    question=data.question,
                    options=list(data.options),
                    correct_option_index=data.correct_option_index or 0,
                    explanation=data.explanation or None,
                    is_evaluated=data.is_evaluated,
                    order=order,
                )
            )

    def _user_with_progress(self, user: User) -> UserWithProgress:
        attempts = quiz_crud.get_attempts_by_user(self.db, user.id)
        latest: dict[int, QuizAttempt] = {}
        for attempt in attempts:
            latest.setdefault(attempt.module_id, attempt)

        summary = UserWithProgress.model_validate(user)
        summary.completed_modules = sum(1 for attempt in latest.values() if attempt.passed)
        summary.total_attempts = len(attempts)
        if attempts:
            summary.average_score = round_half_up(sum(a.score for a in attempts) / len(attempts))
        return summary

    @staticmethod
    def _group_out(group: UserGroup) -> GroupOut:
        view = GroupOut.model_validate(group)
        view.member_count = len(group.members)
        return view
