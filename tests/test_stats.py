from conftest import create_assignment, pdf, submit


def test_teacher_stats_cover_all_owned_assignments(client, teacher, other_teacher, student, student2):
    hw1 = create_assignment(client, teacher, title="HW1")
    hw2 = create_assignment(client, teacher, title="HW2")
    foreign = create_assignment(client, other_teacher, title="Other")

    s1 = submit(client, student, hw1["id"], files=[pdf()]).json()
    submit(client, student2, hw1["id"], files=[pdf()])
    submit(client, student, hw2["id"], files=[pdf()])
    submit(client, student2, foreign["id"], files=[pdf()])

    client.put(f"/api/submissions/{s1['id']}/grade", json={"grade": 90}, headers=teacher["headers"])

    stats = client.get("/api/stats", headers=teacher["headers"]).json()
    assert stats == {"totalAssignments": 2, "totalSubmissions": 3, "pendingReviews": 2}


def test_teacher_stats_when_empty(client, teacher):
    stats = client.get("/api/stats", headers=teacher["headers"]).json()
    assert stats == {"totalAssignments": 0, "totalSubmissions": 0, "pendingReviews": 0}


def test_student_stats(client, teacher, other_teacher, student):
    hw1 = create_assignment(client, teacher, title="HW1")
    hw2 = create_assignment(client, teacher, title="HW2")
    create_assignment(client, other_teacher, title="HW3")

    graded = submit(client, student, hw1["id"], files=[pdf()]).json()
    submit(client, student, hw2["id"], files=[pdf()])
    client.put(f"/api/submissions/{graded['id']}/grade", json={"grade": 7}, headers=teacher["headers"])

    stats = client.get("/api/stats", headers=student["headers"]).json()
    assert stats == {"activeAssignments": 1, "completedAssignments": 2, "pendingGrading": 1}


def test_stats_require_token(client):
    assert client.get("/api/stats").status_code == 401
