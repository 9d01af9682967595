from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base_class import Base

if TYPE_CHECKING:
    from ..user.user_model import User
    from ..module.step_model import ModuleStep


class UserStepProgress(Base):
    """Latest answer of a learner on a step. One row per (user, step)."""

    __tablename__ = "user_step_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "step_id", name="uq_user_step_progress"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    step_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("module_steps.id", ondelete="CASCADE"), index=True, nullable=False
    )
    selected_answer_index: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_correct: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="step_progress")
    step: Mapped["ModuleStep"] = relationship(back_populates="progress_records")

    def __repr__(self):
        return (
            f"<UserStepProgress(user_id={self.user_id}, step_id={self.step_id}, "
            f"is_correct={self.is_correct})>"
        )
