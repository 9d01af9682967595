import enum
from sqlalchemy import Integer, String, Text, ForeignKey, JSON, Enum as EnumSQL, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime

from learnhub.db.base_class import Base

if TYPE_CHECKING:
    from .module_model import Module
    from ..progress.user_step_progress_model import UserStepProgress


class ContentBlockType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"


class ModuleStep(Base):
    """One gated unit of a module: content blocks followed by checkpoints."""
    __tablename__ = "module_steps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("modules.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    checkpoint_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # --- Relations ---
    module: Mapped["Module"] = relationship(back_populates="steps")
    content_blocks: Mapped[List["StepContentBlock"]] = relationship(
        back_populates="step",
        cascade="all, delete-orphan",
        order_by="StepContentBlock.order",
    )
    checkpoints: Mapped[List["StepCheckpoint"]] = relationship(
        back_populates="step",
        cascade="all, delete-orphan",
        order_by="StepCheckpoint.order",
    )
    progress_records: Mapped[List["UserStepProgress"]] = relationship(
        back_populates="step",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<ModuleStep(id={self.id}, module_id={self.module_id}, order={self.order})>"


class StepContentBlock(Base):
    __tablename__ = "step_content_blocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    step_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("module_steps.id", ondelete="CASCADE"), index=True, nullable=False
    )
    block_type: Mapped[ContentBlockType] = mapped_column(
        EnumSQL(ContentBlockType, name="content_block_type_enum", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=ContentBlockType.TEXT,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    # Layout hints, shape depends on block_type (see schemas.module.step_schema).
    layout: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    step: Mapped[ModuleStep] = relationship(back_populates="content_blocks")

    def __repr__(self):
        return f"<StepContentBlock(id={self.id}, type='{self.block_type}', order={self.order})>"


class StepCheckpoint(Base):
    __tablename__ = "step_checkpoints"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    step_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("module_steps.id", ondelete="CASCADE"), index=True, nullable=False
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    correct_option_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_evaluated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    step: Mapped[ModuleStep] = relationship(back_populates="checkpoints")

    def __repr__(self):
        return f"<StepCheckpoint(id={self.id}, step_id={self.step_id}, order={self.order})>"
