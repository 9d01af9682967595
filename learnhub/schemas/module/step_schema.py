from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from learnhub.models.module.step_model import ContentBlockType


# --- Layout metadata ---
# Purely presentational hints, one shape per block type.
class TextLayout(BaseModel):
    type: Literal["text"] = "text"
    font_size: Literal["sm", "base", "lg", "xl"] = "base"
    columns: int = Field(1, ge=1, le=3)


class ImageLayout(BaseModel):
    type: Literal["image"] = "image"
    split_ratio: float = Field(0.5, ge=0.1, le=0.9)
    caption: Optional[str] = None


class VideoLayout(BaseModel):
    type: Literal["video"] = "video"
    autoplay: bool = False
    caption: Optional[str] = None


BlockLayout = Annotated[Union[TextLayout, ImageLayout, VideoLayout], Field(discriminator="type")]


# --- Content blocks ---
class ContentBlockIn(BaseModel):
    id: Optional[int] = None
    block_type: ContentBlockType = ContentBlockType.TEXT
    content: Optional[str] = None
    image_url: Optional[str] = None
    layout: Optional[BlockLayout] = None

    @model_validator(mode="after")
    def _layout_matches_block_type(self) -> "ContentBlockIn":
        if self.layout is not None and self.layout.type != self.block_type.value:
            raise ValueError("layout_type_mismatch")
        return self


class ContentBlockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    block_type: ContentBlockType
    order: int
    content: Optional[str] = None
    image_url: Optional[str] = None
    layout: Optional[BlockLayout] = None


# --- Checkpoints ---
class CheckpointIn(BaseModel):
    id: Optional[int] = None
    question: str = ""
    options: List[str] = Field(default_factory=list)
    correct_option_index: Optional[int] = None
    explanation: Optional[str] = None
    is_evaluated: bool = True

    @property
    def is_complete(self) -> bool:
        return bool(self.question.strip()) and len(self.options) >= 2


class CheckpointOut(BaseModel):
    """Authoring view: always carries the answer key."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    options: List[str]
    correct_option_index: int
    explanation: Optional[str] = None
    is_evaluated: bool
    order: int


class CheckpointView(BaseModel):
    """Learner view: the answer key is only revealed once the step was answered."""

    id: int
    question: str
    options: List[str]
    is_evaluated: bool
    order: int
    correct_option_index: Optional[int] = None
    explanation: Optional[str] = None
    user_answer: Optional[int] = None
    was_correct: Optional[bool] = None


# --- Steps (authoring) ---
class StepIn(BaseModel):
    """One step of a full-replace save.

    Checkpoints come either as the legacy single ``checkpoint`` object or as
    the ``checkpoints`` list. ``normalized_checkpoints`` folds both into one
    ordered list, or ``None`` when the existing checkpoints must be kept.
    """

    id: Optional[int] = None
    title: str = Field(..., min_length=1)
    checkpoint_required: bool = True
    content_blocks: List[ContentBlockIn] = Field(default_factory=list)
    checkpoint: Optional[CheckpointIn] = None
    checkpoints: Optional[List[CheckpointIn]] = None

    def normalized_checkpoints(self) -> Optional[List[CheckpointIn]]:
        if self.checkpoints:
            return list(self.checkpoints)
        if self.checkpoint is not None:
            return [self.checkpoint]
        return None


class StepsSaveIn(BaseModel):
    steps: List[StepIn]


class StepAdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    title: str
    order: int
    checkpoint_required: bool
    content_blocks: List[ContentBlockOut] = Field(default_factory=list)
    checkpoints: List[CheckpointOut] = Field(default_factory=list)


# --- Steps (learner) ---
class StepProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    step_id: int
    selected_answer_index: Optional[int] = None
    is_correct: Optional[bool] = None
    completed_at: Optional[datetime] = None


class StepView(BaseModel):
    id: int
    module_id: int
    title: str
    order: int
    checkpoint_required: bool
    content_blocks: List[ContentBlockOut]
    # ``None`` when the step is locked.
    checkpoints: Optional[List[CheckpointView]] = None
    is_unlocked: bool
    is_completed: bool
    progress: Optional[StepProgressOut] = None


class ModuleWithSteps(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    published: bool
    steps: List[StepView]
    current_step_index: int
    completed_steps: int
    total_steps: int
    total_correct: int
    module_score: Optional[int] = None
    status: Literal["not_started", "in_progress", "completed"]


class CheckpointSubmission(BaseModel):
    # Left untyped: a missing or non-integer value is a 400, checked by the router.
    selected_answer_index: Any = None
    checkpoint_id: Optional[int] = None


class CheckpointResult(BaseModel):
    correct: bool
    unlock_next: bool
    correct_answer_index: Optional[int] = None
    explanation: Optional[str] = None
