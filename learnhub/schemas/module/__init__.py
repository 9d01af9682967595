"""Schemas for modules, steps and quizzes."""

from .module_schema import (
    ModuleAdminDetail,
    ModuleCreate,
    ModuleDetail,
    ModuleOut,
    ModuleUpdate,
    ModuleWithProgress,
)
from .quiz_schema import (
    InlineAnswer,
    QuizAttemptIn,
    QuizAttemptOut,
    QuizAttemptWithDetails,
    QuizOut,
    QuizQuestionIn,
    QuizQuestionOut,
    QuizResult,
    QuizSaveIn,
)
from .step_schema import (
    CheckpointIn,
    CheckpointOut,
    CheckpointResult,
    CheckpointSubmission,
    CheckpointView,
    ContentBlockIn,
    ContentBlockOut,
    ModuleWithSteps,
    StepAdminOut,
    StepIn,
    StepProgressOut,
    StepsSaveIn,
    StepView,
)

__all__ = [
    "ModuleAdminDetail",
    "ModuleCreate",
    "ModuleDetail",
    "ModuleOut",
    "ModuleUpdate",
    "ModuleWithProgress",
    "InlineAnswer",
    "QuizAttemptIn",
    "QuizAttemptOut",
    "QuizAttemptWithDetails",
    "QuizOut",
    "QuizQuestionIn",
    "QuizQuestionOut",
    "QuizResult",
    "QuizSaveIn",
    "CheckpointIn",
    "CheckpointOut",
    "CheckpointResult",
    "CheckpointSubmission",
    "CheckpointView",
    "ContentBlockIn",
    "ContentBlockOut",
    "ModuleWithSteps",
    "StepAdminOut",
    "StepIn",
    "StepProgressOut",
    "StepsSaveIn",
    "StepView",
]
