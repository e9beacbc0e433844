from gradebook.schemas.base import CamelModel

class TeacherStats(CamelModel):
    total_assignments: int
    total_submissions: int
    pending_reviews: int

class StudentStats(CamelModel):
    active_assignments: int
    completed_assignments: int
    pending_grading: int
