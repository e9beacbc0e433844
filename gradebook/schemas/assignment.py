from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator
from gradebook.schemas.base import CamelModel
from gradebook.utils.helpers import INT_COLUMN_MAX, as_utc

class AssignmentCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str
    due_date: datetime
    max_points: int = Field(gt=0, le=INT_COLUMN_MAX)
    allow_late_submissions: bool = False
    require_file_upload: bool = True

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime) -> datetime:
        return as_utc(value)

class AssignmentUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    max_points: Optional[int] = Field(default=None, gt=0, le=INT_COLUMN_MAX)
    allow_late_submissions: Optional[bool] = None
    require_file_upload: Optional[bool] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

class Assignment(CamelModel):
    id: int
    title: str
    description: str
    due_date: datetime
    max_points: int
    allow_late_submissions: bool
    require_file_upload: bool
    teacher_id: int
    created_at: datetime

    @field_validator("due_date", "created_at")
    @classmethod
    def attach_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
