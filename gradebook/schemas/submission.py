from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, Field, field_validator
from gradebook.schemas.base import CamelModel
from gradebook.schemas.assignment import Assignment
from gradebook.schemas.user import UserProfile
from gradebook.utils.helpers import INT_COLUMN_MAX, as_utc

class GradeRequest(CamelModel):
    # max_points is advisory: grades above it are accepted
    grade: int = Field(ge=0, le=INT_COLUMN_MAX)
    feedback: Optional[str] = None

class Submission(CamelModel):
    id: int
    assignment_id: int
    student_id: int
    notes: Optional[str] = None
    # Stored names, read from the ORM "files" column
    file_paths: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("files", "filePaths", "file_paths"),
        serialization_alias="filePaths",
    )
    submitted_at: datetime
    grade: Optional[int] = None
    feedback: Optional[str] = None
    graded_at: Optional[datetime] = None

    @field_validator("submitted_at", "graded_at")
    @classmethod
    def attach_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

class SubmissionWithStudent(Submission):
    student: UserProfile

class SubmissionWithAssignment(Submission):
    assignment: Assignment
