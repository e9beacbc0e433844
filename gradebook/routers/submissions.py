from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from gradebook.core.security.auth import student_required, teacher_required
from gradebook.db.session import get_db
from gradebook.schemas.submission import GradeRequest, Submission, SubmissionWithAssignment
from gradebook.schemas.user import CurrentUser
from gradebook.services.file_storage import FileStorage, get_file_storage
from gradebook.services.grading import SubmissionService

router = APIRouter(tags=["submissions"])

@router.post("/submissions", response_model=Submission)
async def create_submission(
    assignment_id: int = Form(..., alias="assignmentId"),
    notes: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    current_user: CurrentUser = Depends(student_required),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
):
    return await SubmissionService.submit(assignment_id, notes, files or [], current_user, db, storage)

@router.get("/my-submissions", response_model=List[SubmissionWithAssignment])
def my_submissions(
    current_user: CurrentUser = Depends(student_required),
    db: Session = Depends(get_db),
):
    return SubmissionService.list_for_student(current_user, db)

@router.put("/submissions/{submission_id}/grade", response_model=Submission)
def grade_submission(
    submission_id: int,
    data: GradeRequest,
    current_user: CurrentUser = Depends(teacher_required),
    db: Session = Depends(get_db),
):
    return SubmissionService.grade(submission_id, data, current_user, db)
