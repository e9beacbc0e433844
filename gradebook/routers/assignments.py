from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gradebook.core.security.auth import get_current_user, teacher_required
from gradebook.db.session import get_db
from gradebook.schemas.assignment import Assignment, AssignmentCreate, AssignmentUpdate
from gradebook.schemas.submission import SubmissionWithStudent
from gradebook.schemas.user import CurrentUser
from gradebook.services.assignments import AssignmentService
from gradebook.services.file_storage import FileStorage, get_file_storage
from gradebook.services.grading import SubmissionService

router = APIRouter(prefix="/assignments", tags=["assignments"])

@router.post("", response_model=Assignment)
def create_assignment(
    data: AssignmentCreate,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db),
):
    return AssignmentService.create_assignment(data, current_user, db)

@router.get("", response_model=List[Assignment])
def list_assignments(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return AssignmentService.list_assignments(current_user, db)

@router.get("/{assignment_id}", response_model=Assignment)
def get_assignment(
    assignment_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return AssignmentService.get_assignment(assignment_id, db)

@router.put("/{assignment_id}", response_model=Assignment)
def update_assignment(
    assignment_id: int,
    data: AssignmentUpdate,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db),
):
    return AssignmentService.update_assignment(assignment_id, data, current_user, db)

@router.delete("/{assignment_id}")
def delete_assignment(
    assignment_id: int,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
):
    AssignmentService.delete_assignment(assignment_id, current_user, db, storage)
    return {"message": "Assignment deleted successfully"}

@router.get("/{assignment_id}/submissions", response_model=List[SubmissionWithStudent])
def list_assignment_submissions(
    assignment_id: int,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db),
):
    return SubmissionService.list_for_assignment(assignment_id, current_user, db)
