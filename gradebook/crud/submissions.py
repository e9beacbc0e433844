from datetime import datetime
from typing import List, Optional
from sqlalchemy import func, update
from sqlalchemy.orm import Session, joinedload
from gradebook.models.assignment import Assignment
from gradebook.models.submission import Submission

def get_submission(submission_id: int, db: Session) -> Optional[Submission]:
    return db.query(Submission).filter(Submission.id == submission_id).first()

def get_submission_for_pair(assignment_id: int, student_id: int, db: Session) -> Optional[Submission]:
    return db.query(Submission).filter(
        Submission.assignment_id == assignment_id,
        Submission.student_id == student_id,
    ).first()

def get_submissions_by_assignment(assignment_id: int, db: Session) -> List[Submission]:
    return (
        db.query(Submission)
        .options(joinedload(Submission.student))
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )

def get_submissions_by_student(student_id: int, db: Session) -> List[Submission]:
    return (
        db.query(Submission)
        .options(joinedload(Submission.assignment))
        .filter(Submission.student_id == student_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )

def create_submission(db: Session, **fields) -> Submission:
    submission = Submission(**fields)
    db.add(submission)
    db.commit()
    db.refresh(submission)
    return submission

def grade_submission(db: Session, submission_id: int, grade: int, feedback: Optional[str], graded_at: datetime) -> Submission:
    # One UPDATE so the grade triple is always written together
    db.execute(
        update(Submission)
        .where(Submission.id == submission_id)
        .values(grade=grade, feedback=feedback, graded_at=graded_at)
    )
    db.commit()
    return get_submission(submission_id, db)

def count_submissions_for_teacher(teacher_id: int, db: Session, ungraded_only: bool = False) -> int:
    query = (
        db.query(func.count(Submission.id))
        .join(Assignment, Submission.assignment_id == Assignment.id)
        .filter(Assignment.teacher_id == teacher_id)
    )
    if ungraded_only:
        query = query.filter(Submission.grade.is_(None))
    return query.scalar()

def count_submissions_for_student(student_id: int, db: Session, ungraded_only: bool = False) -> int:
    query = db.query(func.count(Submission.id)).filter(Submission.student_id == student_id)
    if ungraded_only:
        query = query.filter(Submission.grade.is_(None))
    return query.scalar()
