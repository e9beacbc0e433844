import logging
from typing import List

from sqlalchemy.orm import Session

from gradebook.core.errors import Forbidden, NotFound
from gradebook.crud import assignments as assignments_crud
from gradebook.models.assignment import Assignment
from gradebook.models.user import RoleType
from gradebook.schemas.assignment import AssignmentCreate, AssignmentUpdate
from gradebook.schemas.user import CurrentUser
from gradebook.services.file_storage import FileStorage

logger = logging.getLogger(__name__)


def _require_teacher(user: CurrentUser, action: str) -> None:
    if user.role != RoleType.TEACHER:
        raise Forbidden(f"Only teachers can {action} assignments")

def _owned_assignment(assignment_id: int, user: CurrentUser, db: Session) -> Assignment:
    assignment = assignments_crud.get_assignment(assignment_id, db)
    if assignment is None:
        raise NotFound("Assignment not found")
    if assignment.teacher_id != user.id:
        raise Forbidden("You can only manage your own assignments")
    return assignment


class AssignmentService:

    @staticmethod
    def create_assignment(data: AssignmentCreate, user: CurrentUser, db: Session) -> Assignment:
        _require_teacher(user, "create")
        assignment = assignments_crud.create_assignment(db, teacher_id=user.id, **data.model_dump())
        logger.info("Assignment %s created by teacher %s", assignment.id, user.id)
        return assignment

    @staticmethod
    def list_assignments(user: CurrentUser, db: Session) -> List[Assignment]:
        match user.role:
            case RoleType.TEACHER:
                return assignments_crud.get_assignments_by_teacher(user.id, db)
            case RoleType.STUDENT:
                return assignments_crud.get_all_assignments(db)

    @staticmethod
    def get_assignment(assignment_id: int, db: Session) -> Assignment:
        assignment = assignments_crud.get_assignment(assignment_id, db)
        if assignment is None:
            raise NotFound("Assignment not found")
        return assignment

    @staticmethod
    def update_assignment(assignment_id: int, data: AssignmentUpdate, user: CurrentUser, db: Session) -> Assignment:
        _require_teacher(user, "update")
        assignment = _owned_assignment(assignment_id, user, db)
        changes = data.model_dump(exclude_unset=True)
        # Explicit nulls do not clear required columns
        changes = {key: value for key, value in changes.items() if value is not None}
        assignment = assignments_crud.update_assignment(db, assignment, **changes)
        logger.info("Assignment %s updated (%s)", assignment.id, ", ".join(sorted(changes)) or "no changes")
        return assignment

    @staticmethod
    def delete_assignment(assignment_id: int, user: CurrentUser, db: Session, storage: FileStorage) -> None:
        _require_teacher(user, "delete")
        assignment = _owned_assignment(assignment_id, user, db)
        stored_files = [name for submission in assignment.submissions for name in (submission.files or [])]
        assignments_crud.delete_assignment(db, assignment)
        storage.delete_files(stored_files)
        logger.info("Assignment %s deleted with %d stored files", assignment_id, len(stored_files))
