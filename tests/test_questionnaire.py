"""
Tests for questionnaire validation and the student submission flow
"""
import httpx
import pytest

from models.profiles import Profile, Recommendation
from models.questionnaires import Response
from services.questionnaire import QUESTION_KEYS, validate_answers
from utils.errors import InvalidAnswers, MissingAnswers, ValidationFailed

from conftest import full_answers, login, make_group, make_questionnaire, make_student


class TestValidateAnswers:
    def test_returns_answers_in_canonical_order(self):
        answers = {key: (i % 5) + 1 for i, key in enumerate(QUESTION_KEYS)}
        shuffled = dict(reversed(list(answers.items())))
        assert validate_answers(shuffled) == [(i % 5) + 1 for i in range(30)]

    def test_thirty_questions(self):
        assert len(QUESTION_KEYS) == 30
        assert len(set(QUESTION_KEYS)) == 30

    def test_missing_answers_listed_in_canonical_order(self):
        answers = full_answers()
        del answers[QUESTION_KEYS[29]]
        answers[QUESTION_KEYS[4]] = None

        with pytest.raises(MissingAnswers) as exc:
            validate_answers(answers)
        assert exc.value.missing == [QUESTION_KEYS[4], QUESTION_KEYS[29]]
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("bad", [0, 6, "3", 2.5, True])
    def test_out_of_range_or_non_integer(self, bad):
        answers = full_answers()
        answers[QUESTION_KEYS[0]] = bad
        with pytest.raises(InvalidAnswers) as exc:
            validate_answers(answers)
        assert exc.value.invalid == [QUESTION_KEYS[0]]

    def test_unknown_keys_are_ignored(self):
        answers = full_answers(5)
        answers["extra question"] = 99
        assert validate_answers(answers) == [5] * 30

    def test_non_dict_payload(self):
        with pytest.raises(ValidationFailed):
            validate_answers([3] * 30)


@pytest.fixture
def enrolled_student(client, db):
    group = make_group(db)
    questionnaire = make_questionnaire(db)
    student = make_student(db, "A001", group=group)
    login(client, "student", "A001")
    return student, group, questionnaire


class TestSubmitQuestionnaire:
    def test_success_persists_response_profile_and_recommendations(self, client, db, enrolled_student, predictor, workflow):
        student, group, questionnaire = enrolled_student

        r = client.post("/api/student/questionnaire", json={"answers": full_answers(4)})
        assert r.status_code == 200, r.text
        body = r.json()
        assert body["ok"] is True

        # 예측기에는 정규 순서의 응답 목록이 전달됨
        assert predictor.requests == [{
            "respuestas": [4] * 30,
            "studentId": student.id,
            "questionnaireId": questionnaire.id,
        }]

        response = db.get(Response, body["response_id"])
        assert response.student_id == student.id
        assert response.raw_answers["ordered"] == [4] * 30

        profile = db.get(Profile, body["profile_id"])
        assert profile.group_id == group.id
        assert profile.extraversion_score == 35
        assert profile.extraversion_level == "high"        # 예측기 라벨 "Alto"
        assert profile.conscientiousness_level == "medium"  # 점수 25
        assert profile.agreeableness_level == "low"         # 점수 12
        assert profile.openness_score is None
        assert profile.emotional_stability_level is None
        assert profile.model_version == "v2.1"

        # 워크플로 payload 와 저장된 추천
        assert workflow.requests[0]["perfilId"] == profile.id
        assert workflow.requests[0]["traits"]["agreeableness"] == {"score": 12, "level": "low"}
        recs = db.query(Recommendation).filter(Recommendation.profile_id == profile.id).all()
        assert {r.trait for r in recs} == {"extraversion", "agreeableness", "conscientiousness"}
        by_trait = {r.trait: r for r in recs}
        assert by_trait["extraversion"].strategy == "Lead a study group\n\nPresent your findings"
        assert by_trait["extraversion"].source == "rag-n8n-v1"

    def test_status_reflects_submission(self, client, enrolled_student):
        assert client.get("/api/student/questionnaire/status").json()["answered"] is False
        client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert client.get("/api/student/questionnaire/status").json()["answered"] is True

    def test_missing_answers_returns_list(self, client, db, enrolled_student, predictor):
        answers = full_answers()
        del answers[QUESTION_KEYS[0]]
        del answers[QUESTION_KEYS[10]]

        r = client.post("/api/student/questionnaire", json={"answers": answers})
        assert r.status_code == 400
        body = r.json()
        assert body["error"] == "Missing answers in the questionnaire"
        assert body["missing_questions"] == [QUESTION_KEYS[0], QUESTION_KEYS[10]]
        assert predictor.requests == []
        assert db.query(Response).count() == 0

    def test_resubmission_is_409(self, client, db, enrolled_student):
        assert client.post("/api/student/questionnaire", json={"answers": full_answers()}).status_code == 200
        r = client.post("/api/student/questionnaire", json={"answers": full_answers(1)})
        assert r.status_code == 409
        assert db.query(Response).count() == 1
        assert db.query(Profile).count() == 1

    def test_predictor_failure_is_502_and_stores_nothing(self, client, db, enrolled_student, predictor):
        predictor.status_code = 500
        predictor.body = {"detail": "model crashed"}

        r = client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert r.status_code == 502
        assert r.json()["error"] == "Error processing answers in the prediction model"
        assert db.query(Response).count() == 0
        assert db.query(Profile).count() == 0

    def test_predictor_unreachable_is_502(self, client, db, enrolled_student, predictor):
        predictor.error = httpx.ConnectError("connection refused")
        r = client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert r.status_code == 502

    def test_workflow_failure_does_not_fail_submission(self, client, db, enrolled_student, workflow):
        workflow.status_code = 500
        workflow.body = {"message": "boom"}

        r = client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert r.status_code == 200
        assert db.query(Profile).count() == 1
        assert db.query(Recommendation).count() == 0

    def test_student_without_enrollment_is_400(self, client, db, predictor):
        make_questionnaire(db)
        make_student(db, "A002")
        login(client, "student", "A002")

        r = client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert r.status_code == 400
        assert predictor.requests == []

    def test_no_active_questionnaire_is_500(self, client, db):
        group = make_group(db)
        make_student(db, "A001", group=group)
        login(client, "student", "A001")

        r = client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert r.status_code == 500
        assert r.json()["code"] == "SERVER_MISCONFIGURED"

    def test_profile_goes_to_earliest_enrollment(self, client, db, enrolled_student):
        student, first_group, _ = enrolled_student
        second_group = make_group(db, name="Biology")
        client.post("/api/student/groups/join", json={"group_id": second_group.id})

        r = client.post("/api/student/questionnaire", json={"answers": full_answers()})
        assert db.get(Profile, r.json()["profile_id"]).group_id == first_group.id
