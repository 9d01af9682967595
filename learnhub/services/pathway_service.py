from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from learnhub.crud import group_crud, pathway_crud
from learnhub.schemas.pathway.pathway_schema import AssignedPathway, PathwayOut


def _earliest(dates: Iterable[Optional[datetime]]) -> Optional[datetime]:
    known = [value for value in dates if value is not None]
    return min(known) if known else None


class PathwayService:
    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def get_user_assigned_pathways(self) -> list[AssignedPathway]:
        """Published pathways reaching the user directly or through a group.

        A pathway assigned several times appears once, with the earliest due
        date among its assignments.
        """
        group_ids = group_crud.get_user_group_ids(self.db, self.user_id)
        assignments = [
            *pathway_crud.get_user_assignments(self.db, self.user_id),
            *pathway_crud.get_group_assignments(self.db, group_ids),
        ]

        due_dates: dict[int, list[Optional[datetime]]] = {}
        for assignment in assignments:
            due_dates.setdefault(assignment.pathway_id, []).append(assignment.due_date)

        result: list[AssignedPathway] = []
        for pathway_id, dates in due_dates.items():
            pathway = pathway_crud.get_pathway(self.db, pathway_id)
            if pathway is None or not pathway.published:
                continue
            view = PathwayOut.model_validate(pathway)
            result.append(AssignedPathway(**view.model_dump(), due_date=_earliest(dates)))

        result.sort(key=lambda item: (item.due_date is None, item.due_date or datetime.max, item.name))
        return result
