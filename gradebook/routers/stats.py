from typing import Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gradebook.core.security.auth import get_current_user
from gradebook.db.session import get_db
from gradebook.schemas.stats import StudentStats, TeacherStats
from gradebook.schemas.user import CurrentUser
from gradebook.services.stats import stats_for

router = APIRouter(tags=["stats"])

@router.get("/stats", response_model=Union[TeacherStats, StudentStats])
def get_stats(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return stats_for(current_user, db)
