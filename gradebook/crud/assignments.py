from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from gradebook.models.assignment import Assignment

def get_assignment(assignment_id: int, db: Session) -> Optional[Assignment]:
    return db.query(Assignment).filter(Assignment.id == assignment_id).first()

def get_assignments_by_teacher(teacher_id: int, db: Session) -> List[Assignment]:
    return (
        db.query(Assignment)
        .filter(Assignment.teacher_id == teacher_id)
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .all()
    )

def get_all_assignments(db: Session) -> List[Assignment]:
    return db.query(Assignment).order_by(Assignment.created_at.desc(), Assignment.id.desc()).all()

def count_assignments(db: Session, teacher_id: Optional[int] = None) -> int:
    query = db.query(func.count(Assignment.id))
    if teacher_id is not None:
        query = query.filter(Assignment.teacher_id == teacher_id)
    return query.scalar()

def create_assignment(db: Session, teacher_id: int, **fields) -> Assignment:
    assignment = Assignment(teacher_id=teacher_id, **fields)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment

def update_assignment(db: Session, assignment: Assignment, **fields) -> Assignment:
    for key, value in fields.items():
        setattr(assignment, key, value)
    db.commit()
    db.refresh(assignment)
    return assignment

def delete_assignment(db: Session, assignment: Assignment) -> None:
    db.delete(assignment)
    db.commit()
