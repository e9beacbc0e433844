"""
Submission lifecycle per (assignment, student) pair.

A pair starts with no submission. ``submit`` creates the one submission the pair
may ever have; ``grade`` records grade, feedback and grading time together and
may be repeated, the last grade wins.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gradebook.core.errors import Conflict, ErrorCode, Forbidden, NotFound, ValidationError
from gradebook.crud import assignments as assignments_crud
from gradebook.crud import submissions as submissions_crud
from gradebook.models.assignment import Assignment
from gradebook.models.submission import Submission
from gradebook.models.user import RoleType
from gradebook.schemas.submission import GradeRequest
from gradebook.schemas.user import CurrentUser
from gradebook.services.file_storage import FileStorage
from gradebook.utils.helpers import as_utc, get_utc_now

logger = logging.getLogger(__name__)


def check_submission_policy(assignment: Assignment, file_count: int, now: datetime) -> None:
    """Reject a submission the assignment's policy flags do not allow."""
    if assignment.require_file_upload and file_count == 0:
        raise ValidationError("This assignment requires at least one file", ErrorCode.FILE_REQUIRED)
    if not assignment.allow_late_submissions and as_utc(now) > as_utc(assignment.due_date):
        raise ValidationError("Submission deadline has passed", ErrorCode.LATE_SUBMISSION)


class SubmissionService:

    @staticmethod
    async def submit(
        assignment_id: int,
        notes: Optional[str],
        files: List[UploadFile],
        user: CurrentUser,
        db: Session,
        storage: FileStorage,
        now: Optional[datetime] = None,
    ) -> Submission:
        if user.role != RoleType.STUDENT:
            raise Forbidden("Only students can submit assignments")

        assignment = assignments_crud.get_assignment(assignment_id, db)
        if assignment is None:
            raise NotFound("Assignment not found")

        if submissions_crud.get_submission_for_pair(assignment_id, user.id, db) is not None:
            logger.warning("Duplicate submission by student %s for assignment %s", user.id, assignment_id)
            raise Conflict("Assignment already submitted", ErrorCode.DUPLICATE_SUBMISSION)

        now = now or get_utc_now()
        check_submission_policy(assignment, len(files), now)

        stored = await storage.save_files(files)
        try:
            submission = submissions_crud.create_submission(
                db,
                assignment_id=assignment_id,
                student_id=user.id,
                notes=notes or None,
                files=stored,
                submitted_at=now,
            )
        except IntegrityError:
            # A concurrent submit for the same pair won the unique constraint
            db.rollback()
            storage.delete_files(stored)
            raise Conflict("Assignment already submitted", ErrorCode.DUPLICATE_SUBMISSION)
        except Exception:
            db.rollback()
            storage.delete_files(stored)
            raise

        logger.info(
            "Submission %s created by student %s for assignment %s with %d files",
            submission.id, user.id, assignment_id, len(stored),
        )
        return submission

    @staticmethod
    def grade(
        submission_id: int,
        data: GradeRequest,
        user: CurrentUser,
        db: Session,
        now: Optional[datetime] = None,
    ) -> Submission:
        if user.role != RoleType.TEACHER:
            raise Forbidden("Only teachers can grade submissions")

        submission = submissions_crud.get_submission(submission_id, db)
        if submission is None:
            raise NotFound("Submission not found")
        if submission.assignment.teacher_id != user.id:
            raise Forbidden("You can only grade submissions to your own assignments")

        if data.grade > submission.assignment.max_points:
            logger.warning(
                "Submission %s graded %d above max points %d",
                submission_id, data.grade, submission.assignment.max_points,
            )

        submission = submissions_crud.grade_submission(
            db, submission_id, data.grade, data.feedback, now or get_utc_now()
        )
        logger.info("Submission %s graded %d by teacher %s", submission_id, data.grade, user.id)
        return submission

    @staticmethod
    def list_for_assignment(assignment_id: int, user: CurrentUser, db: Session) -> List[Submission]:
        if user.role != RoleType.TEACHER:
            raise Forbidden("Only teachers can view submissions")
        assignment = assignments_crud.get_assignment(assignment_id, db)
        if assignment is None:
            raise NotFound("Assignment not found")
        if assignment.teacher_id != user.id:
            raise Forbidden("You can only view submissions to your own assignments")
        return submissions_crud.get_submissions_by_assignment(assignment_id, db)

    @staticmethod
    def list_for_student(user: CurrentUser, db: Session) -> List[Submission]:
        if user.role != RoleType.STUDENT:
            raise Forbidden("Only students can view their submissions")
        return submissions_crud.get_submissions_by_student(user.id, db)
