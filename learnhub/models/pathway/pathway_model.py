from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnhub.db.base_class import Base

if TYPE_CHECKING:
    from ..module.module_model import Module
    from ..user.group_model import UserGroup
    from ..user.user_model import User


class TrainingPathway(Base):
    __tablename__ = "training_pathways"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    modules: Mapped[List["PathwayModule"]] = relationship(
        back_populates="pathway",
        cascade="all, delete-orphan",
        order_by="PathwayModule.order",
    )
    group_assignments: Mapped[List["GroupPathwayAssignment"]] = relationship(
        back_populates="pathway",
        cascade="all, delete-orphan",
    )
    user_assignments: Mapped[List["UserPathwayAssignment"]] = relationship(
        back_populates="pathway",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<TrainingPathway(id={self.id}, name='{self.name}')>"


class PathwayModule(Base):
    __tablename__ = "pathway_modules"
    __table_args__ = (
        UniqueConstraint("pathway_id", "module_id", name="uq_pathway_module"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pathway_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("training_pathways.id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("modules.id", ondelete="CASCADE"), index=True, nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    pathway: Mapped[TrainingPathway] = relationship(back_populates="modules")
    module: Mapped["Module"] = relationship(back_populates="pathway_links")


class GroupPathwayAssignment(Base):
    __tablename__ = "group_pathway_assignments"
    __table_args__ = (
        UniqueConstraint("group_id", "pathway_id", name="uq_group_pathway"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_groups.id", ondelete="CASCADE"), index=True, nullable=False
    )
    pathway_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("training_pathways.id", ondelete="CASCADE"), index=True, nullable=False
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    group: Mapped["UserGroup"] = relationship(back_populates="pathway_assignments")
    pathway: Mapped[TrainingPathway] = relationship(back_populates="group_assignments")


class UserPathwayAssignment(Base):
    __tablename__ = "user_pathway_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "pathway_id", name="uq_user_pathway"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    pathway_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("training_pathways.id", ondelete="CASCADE"), index=True, nullable=False
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="pathway_assignments")
    pathway: Mapped[TrainingPathway] = relationship(back_populates="user_assignments")
