from sqlalchemy.engine import Engine

from gradebook.db.base import Base
# Imported so every table is registered on Base.metadata
from gradebook.models import assignment, submission, user  # noqa: F401

def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet"""
    Base.metadata.create_all(bind=engine)
