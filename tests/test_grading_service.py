import io
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import UploadFile
from sqlalchemy.orm import sessionmaker
from starlette.datastructures import Headers

from gradebook.core.errors import Conflict, ErrorCode, Forbidden, ValidationError
from gradebook.crud import submissions as submissions_crud
from gradebook.crud import users as users_crud
from gradebook.db.init_db import init_db
from gradebook.db.session import build_engine
from gradebook.models.submission import Submission
from gradebook.models.user import RoleType
from gradebook.schemas.assignment import AssignmentCreate
from gradebook.schemas.submission import GradeRequest
from gradebook.schemas.user import CurrentUser
from gradebook.services.assignments import AssignmentService
from gradebook.services.grading import SubmissionService, check_submission_policy
from gradebook.services.stats import stats_for
from gradebook.utils.helpers import as_utc

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _account(db, email, role):
    user = users_crud.create_user(
        db,
        email=email,
        hashed_password="not-a-real-hash",
        first_name="First",
        last_name="Last",
        role=role,
    )
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def _pdf(name="work.pdf"):
    return UploadFile(
        file=io.BytesIO(b"%PDF-1.4"),
        filename=name,
        headers=Headers({"content-type": "application/pdf"}),
    )


def _make_create(**overrides):
    base = dict(
        title="Compito",
        description="Desc",
        due_date=NOW + timedelta(days=7),
        max_points=100,
    )
    base.update(overrides)
    return AssignmentCreate(**base)


@pytest.fixture
def teacher(db):
    return _account(db, "teacher@x.com", RoleType.TEACHER)


@pytest.fixture
def student(db):
    return _account(db, "student@x.com", RoleType.STUDENT)


@pytest.fixture
def assignment(db, teacher):
    return AssignmentService.create_assignment(_make_create(), teacher, db)


@pytest.mark.anyio
async def test_submit_then_grade(db, storage, teacher, student, assignment):
    submission = await SubmissionService.submit(
        assignment.id, "notes", [_pdf()], student, db, storage, now=NOW
    )
    assert submission.grade is None
    assert submission.graded_at is None

    graded = SubmissionService.grade(
        submission.id, GradeRequest(grade=95, feedback="ok"), teacher, db, now=NOW
    )
    assert graded.grade == 95
    assert graded.feedback == "ok"
    assert graded.graded_at is not None


@pytest.mark.anyio
async def test_unique_constraint_settles_racing_submits(db, storage, student, assignment, monkeypatch):
    await SubmissionService.submit(assignment.id, None, [_pdf()], student, db, storage, now=NOW)
    before = set(os.listdir(storage.upload_dir))

    # Pretend the duplicate check ran before the first insert committed
    monkeypatch.setattr(submissions_crud, "get_submission_for_pair", lambda *args: None)

    with pytest.raises(Conflict) as excinfo:
        await SubmissionService.submit(assignment.id, None, [_pdf("second.pdf")], student, db, storage, now=NOW)

    assert excinfo.value.code == ErrorCode.DUPLICATE_SUBMISSION
    assert db.query(Submission).count() == 1
    assert set(os.listdir(storage.upload_dir)) == before


@pytest.mark.anyio
async def test_teacher_cannot_submit(db, storage, teacher, assignment):
    with pytest.raises(Forbidden):
        await SubmissionService.submit(assignment.id, None, [_pdf()], teacher, db, storage, now=NOW)


def test_student_cannot_grade(db, student):
    with pytest.raises(Forbidden):
        SubmissionService.grade(1, GradeRequest(grade=1), student, db)


def test_policy_requires_file(assignment):
    with pytest.raises(ValidationError) as excinfo:
        check_submission_policy(assignment, 0, NOW)
    assert excinfo.value.code == ErrorCode.FILE_REQUIRED


def test_policy_deadline(db, teacher):
    strict = AssignmentService.create_assignment(_make_create(due_date=NOW - timedelta(hours=1)), teacher, db)
    lenient = AssignmentService.create_assignment(
        _make_create(due_date=NOW - timedelta(hours=1), allow_late_submissions=True), teacher, db
    )

    with pytest.raises(ValidationError) as excinfo:
        check_submission_policy(strict, 1, NOW)
    assert excinfo.value.code == ErrorCode.LATE_SUBMISSION

    check_submission_policy(lenient, 1, NOW)
    # On time is fine either way
    check_submission_policy(strict, 1, NOW - timedelta(days=1))


def test_list_assignments_dispatches_on_role(db, teacher, student, assignment):
    other = _account(db, "other@x.com", RoleType.TEACHER)
    AssignmentService.create_assignment(_make_create(title="Altro"), other, db)

    assert [a.title for a in AssignmentService.list_assignments(teacher, db)] == ["Compito"]
    assert {a.title for a in AssignmentService.list_assignments(student, db)} == {"Compito", "Altro"}


@pytest.mark.anyio
async def test_stats_for_each_role(db, storage, teacher, student, assignment):
    second = AssignmentService.create_assignment(_make_create(title="Second"), teacher, db)
    await SubmissionService.submit(assignment.id, None, [_pdf()], student, db, storage, now=NOW)
    await SubmissionService.submit(second.id, None, [_pdf()], student, db, storage, now=NOW)

    teacher_view = stats_for(teacher, db)
    assert (teacher_view.total_assignments, teacher_view.total_submissions, teacher_view.pending_reviews) == (2, 2, 2)

    student_view = stats_for(student, db)
    assert (
        student_view.active_assignments,
        student_view.completed_assignments,
        student_view.pending_grading,
    ) == (0, 2, 2)


def test_concurrent_grades_settle_on_one_write(tmp_path):
    # Separate connections need a database file rather than the shared in-memory one
    engine = build_engine(f"sqlite:///{tmp_path / 'grading.db'}")
    init_db(engine)
    make_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    with make_session() as setup:
        teacher = _account(setup, "teacher@x.com", RoleType.TEACHER)
        student = _account(setup, "student@x.com", RoleType.STUDENT)
        assignment = AssignmentService.create_assignment(_make_create(), teacher, setup)
        submission_id = submissions_crud.create_submission(
            setup, assignment_id=assignment.id, student_id=student.id, files=[], submitted_at=NOW
        ).id

    writes = [
        (60, "Needs another pass", NOW + timedelta(hours=1)),
        (90, "Well argued", NOW + timedelta(hours=2)),
    ]
    start = threading.Barrier(len(writes))

    def grade(write):
        grade, feedback, graded_at = write
        with make_session() as session:
            start.wait()
            SubmissionService.grade(
                submission_id, GradeRequest(grade=grade, feedback=feedback), teacher, session, now=graded_at
            )

    try:
        with ThreadPoolExecutor(max_workers=len(writes)) as pool:
            for future in [pool.submit(grade, write) for write in writes]:
                future.result()

        with make_session() as session:
            final = submissions_crud.get_submission(submission_id, session)
            outcome = (final.grade, final.feedback, as_utc(final.graded_at))
    finally:
        engine.dispose()

    assert outcome in writes
