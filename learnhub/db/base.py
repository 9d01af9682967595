"""Imports every SQLAlchemy model so ``Base.metadata`` knows about all tables."""

from learnhub.db.base_class import Base

# Users & groups
from learnhub.models.user.user_model import User, UserRole
from learnhub.models.user.group_model import UserGroup, GroupMember

# Modules, steps & quizzes
from learnhub.models.module.module_model import Module
from learnhub.models.module.step_model import (
    ContentBlockType,
    ModuleStep,
    StepCheckpoint,
    StepContentBlock,
)
from learnhub.models.module.quiz_model import Quiz, QuizAttempt, QuizQuestion

# Progress
from learnhub.models.progress.user_step_progress_model import UserStepProgress

# Pathways
from learnhub.models.pathway.pathway_model import (
    GroupPathwayAssignment,
    PathwayModule,
    TrainingPathway,
    UserPathwayAssignment,
)

__all__ = (
    "Base",
    "User",
    "UserRole",
    "UserGroup",
    "GroupMember",
    "Module",
    "ContentBlockType",
    "ModuleStep",
    "StepCheckpoint",
    "StepContentBlock",
    "Quiz",
    "QuizAttempt",
    "QuizQuestion",
    "UserStepProgress",
    "GroupPathwayAssignment",
    "PathwayModule",
    "TrainingPathway",
    "UserPathwayAssignment",
)
