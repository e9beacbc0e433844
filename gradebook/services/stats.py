from typing import Union

from sqlalchemy.orm import Session

from gradebook.crud import assignments as assignments_crud
from gradebook.crud import submissions as submissions_crud
from gradebook.models.user import RoleType
from gradebook.schemas.stats import StudentStats, TeacherStats
from gradebook.schemas.user import CurrentUser


def teacher_stats(teacher_id: int, db: Session) -> TeacherStats:
    return TeacherStats(
        total_assignments=assignments_crud.count_assignments(db, teacher_id=teacher_id),
        total_submissions=submissions_crud.count_submissions_for_teacher(teacher_id, db),
        pending_reviews=submissions_crud.count_submissions_for_teacher(teacher_id, db, ungraded_only=True),
    )

def student_stats(student_id: int, db: Session) -> StudentStats:
    completed = submissions_crud.count_submissions_for_student(student_id, db)
    # Past-due assignments still count as active
    active = max(assignments_crud.count_assignments(db) - completed, 0)
    return StudentStats(
        active_assignments=active,
        completed_assignments=completed,
        pending_grading=submissions_crud.count_submissions_for_student(student_id, db, ungraded_only=True),
    )

def stats_for(user: CurrentUser, db: Session) -> Union[TeacherStats, StudentStats]:
    match user.role:
        case RoleType.TEACHER:
            return teacher_stats(user.id, db)
        case RoleType.STUDENT:
            return student_stats(user.id, db)
