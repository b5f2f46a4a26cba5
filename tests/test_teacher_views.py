"""
Tests for teacher group management, group summary and student detail
"""
import pytest

from models.course_groups import CourseGroup, TeacherAssignment
from models.profiles import Profile, Recommendation
from models.questionnaires import Response
from services import group_summary
from services.group_summary import assign_teacher

from conftest import login, make_group, make_questionnaire, make_student, make_teacher


def _add_profile(db, student, group, questionnaire, levels, response=None):
    if response is None:
        response = Response(questionnaire_id=questionnaire.id, student_id=student.id, raw_answers={"ordered": []})
        db.add(response)
        db.flush()
    extraversion, conscientiousness, agreeableness = levels
    profile = Profile(
        response_id=response.id,
        group_id=group.id,
        extraversion_score=10,
        extraversion_level=extraversion,
        conscientiousness_score=20,
        conscientiousness_level=conscientiousness,
        agreeableness_score=30,
        agreeableness_level=agreeableness,
        model_version="v1.0",
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def classroom(client, db):
    group = make_group(db)
    other_group = make_group(db, name="Chemistry")
    questionnaire = make_questionnaire(db)
    teacher = make_teacher(db, "T001", group=group)
    login(client, "teacher", "T001")
    return teacher, group, other_group, questionnaire


class TestTeacherGroups:
    def test_lists_only_assigned_groups_with_counts(self, client, db, classroom):
        _, group, _, questionnaire = classroom
        student = make_student(db, "A001", group=group)
        _add_profile(db, student, group, questionnaire, ("low", "low", "low"))

        groups = client.get("/api/teacher/groups").json()["groups"]
        assert len(groups) == 1
        assert groups[0]["id"] == group.id
        assert groups[0]["student_count"] == 1
        assert groups[0]["profile_count"] == 1

    def test_create_group(self, client, db, classroom):
        teacher = classroom[0]
        r = client.post("/api/teacher/groups", json={"name": " Physics ", "section": "7BM3", "cohort": ""})
        assert r.status_code == 201
        group = r.json()["group"]
        assert group["name"] == "Physics"
        assert group["cohort"] is None
        assert db.query(TeacherAssignment).filter(
            TeacherAssignment.teacher_id == teacher.id, TeacherAssignment.group_id == group["id"]
        ).count() == 1

    def test_create_group_requires_name(self, client, db, classroom):
        before = db.query(CourseGroup).count()
        r = client.post("/api/teacher/groups", json={"name": "   "})
        assert r.status_code == 400
        assert db.query(CourseGroup).count() == before

    def test_join_group_is_idempotent(self, client, db, classroom):
        teacher, _, other_group, _ = classroom
        for _ in range(2):
            r = client.post("/api/teacher/groups/join", json={"group_id": other_group.id})
            assert r.status_code == 200
        assert db.query(TeacherAssignment).filter(TeacherAssignment.teacher_id == teacher.id).count() == 2

    def test_join_unknown_group_is_404(self, client, classroom):
        assert client.post("/api/teacher/groups/join", json={"group_id": 999}).status_code == 404


class TestGroupSummary:
    def test_unassigned_group_is_403(self, client, classroom):
        other_group = classroom[2]
        r = client.get(f"/api/teacher/groups/{other_group.id}/students")
        assert r.status_code == 403

    def test_nonexistent_group_is_also_403(self, client, classroom):
        assert client.get("/api/teacher/groups/999/students").status_code == 403

    def test_roster_and_level_tally(self, client, db, classroom):
        _, group, _, questionnaire = classroom
        ana = make_student(db, "A001", group=group)
        ben = make_student(db, "A002", group=group, first_name="Ben", last_name="Soto")
        make_student(db, "A003", group=group, first_name="Cris", last_name="Vega")

        _add_profile(db, ana, group, questionnaire, ("high", "medium", "low"))
        _add_profile(db, ben, group, questionnaire, ("high", "low", "low"))

        body = client.get(f"/api/teacher/groups/{group.id}/students").json()
        assert body["group"]["id"] == group.id
        assert [s["full_name"] for s in body["students"]] == ["Ana Lopez", "Ben Soto", "Cris Vega"]
        assert [s["has_answered"] for s in body["students"]] == [True, True, False]
        assert body["students"][0]["conscientiousness_level"] == "medium"
        assert body["students"][2]["extraversion_level"] is None

        assert body["summary"] == {
            "extraversion": {"low": 0, "medium": 0, "high": 2},
            "conscientiousness": {"low": 1, "medium": 1, "high": 0},
            "agreeableness": {"low": 2, "medium": 0, "high": 0},
        }

    def test_only_latest_profile_per_student_is_counted(self, client, db, classroom):
        _, group, _, questionnaire = classroom
        ana = make_student(db, "A001", group=group)
        first = _add_profile(db, ana, group, questionnaire, ("low", "low", "low"))
        _add_profile(db, ana, group, questionnaire, ("high", "high", "high"), response=first.response)

        body = client.get(f"/api/teacher/groups/{group.id}/students").json()
        assert len(body["students"]) == 1
        assert body["students"][0]["extraversion_level"] == "high"
        assert body["summary"]["extraversion"] == {"low": 0, "medium": 0, "high": 1}

    def test_profiles_from_other_groups_are_ignored(self, client, db, classroom):
        _, group, other_group, questionnaire = classroom
        ana = make_student(db, "A001", group=group)
        _add_profile(db, ana, other_group, questionnaire, ("high", "high", "high"))

        body = client.get(f"/api/teacher/groups/{group.id}/students").json()
        assert body["students"][0]["has_answered"] is False
        assert body["summary"]["extraversion"]["high"] == 0


class TestStudentDetail:
    def test_detail_with_profile_and_recommendations(self, client, db, classroom):
        _, group, _, questionnaire = classroom
        ana = make_student(db, "A001", group=group)
        profile = _add_profile(db, ana, group, questionnaire, ("high", "medium", "low"))
        db.add(Recommendation(profile_id=profile.id, trait="extraversion", strategy="Lead", source="rag-n8n-v1"))
        db.commit()

        r = client.get(f"/api/teacher/groups/{group.id}/students/{ana.id}")
        assert r.status_code == 200
        body = r.json()
        assert body["student"]["full_name"] == "Ana Lopez"
        assert body["profile"]["extraversion_level"] == "high"
        assert body["profile"]["questionnaire_version"] == questionnaire.version
        assert body["profile"]["openness_score"] is None
        assert [rec["strategy"] for rec in body["recommendations"]] == ["Lead"]

    def test_detail_without_profile(self, client, db, classroom):
        _, group, _, _ = classroom
        ana = make_student(db, "A001", group=group)

        body = client.get(f"/api/teacher/groups/{group.id}/students/{ana.id}").json()
        assert body["profile"] is None
        assert body["recommendations"] == []

    def test_student_not_in_group_is_404(self, client, db, classroom):
        _, group, other_group, _ = classroom
        outsider = make_student(db, "A009", group=other_group)
        assert client.get(f"/api/teacher/groups/{group.id}/students/{outsider.id}").status_code == 404

    def test_teacher_id_is_not_a_student(self, client, classroom):
        teacher, group, _, _ = classroom
        assert client.get(f"/api/teacher/groups/{group.id}/students/{teacher.id}").status_code == 404

    def test_unassigned_group_detail_is_403(self, client, db, classroom):
        _, _, other_group, _ = classroom
        outsider = make_student(db, "A009", group=other_group)
        assert client.get(f"/api/teacher/groups/{other_group.id}/students/{outsider.id}").status_code == 403


class TestAssignTeacher:
    def test_existing_assignment_is_not_duplicated(self, db):
        group = make_group(db)
        teacher = make_teacher(db, "T001", group=group)
        assert assign_teacher(db, teacher.id, group.id) is False
        assert db.query(TeacherAssignment).count() == 1

    def test_concurrent_assignment_is_treated_as_assigned(self, db, monkeypatch):
        group = make_group(db)
        teacher = make_teacher(db, "T001", group=group)
        # 다른 요청이 확인과 커밋 사이에 먼저 연결한 상황
        monkeypatch.setattr(group_summary, "is_assigned", lambda *args: False)

        assert assign_teacher(db, teacher.id, group.id) is False
        assert db.query(TeacherAssignment).count() == 1

    def test_new_assignment(self, db):
        group = make_group(db)
        teacher = make_teacher(db, "T001")
        assert assign_teacher(db, teacher.id, group.id) is True
        assert db.query(TeacherAssignment).count() == 1
