from sqlalchemy import Integer, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from learnhub.db.base_class import Base

if TYPE_CHECKING:
    from .step_model import ModuleStep
    from .quiz_model import Quiz
    from ..pathway.pathway_model import PathwayModule


class Module(Base):
    """A training module: an ordered list of steps closed by an optional quiz."""
    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # --- Relations ---
    steps: Mapped[List["ModuleStep"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="ModuleStep.order",
    )
    quiz: Mapped[Optional["Quiz"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
        uselist=False,
    )
    pathway_links: Mapped[List["PathwayModule"]] = relationship(
        back_populates="module",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Module(id={self.id}, title='{self.title}', order={self.order})>"
