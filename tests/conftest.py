"""
공통 테스트 픽스처

- 앱 import 전에 환경변수를 설정해 in-memory sqlite / 빠른 bcrypt 라운드를 사용한다.
- 예측기와 추천 워크플로는 httpx.MockTransport 로 대체한다.
"""
import os

os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["INTAKE_TOKEN"] = "test-intake-token"
os.environ["RECOMMENDATIONS_WEBHOOK_URL"] = "http://workflow.test/webhook"
os.environ["PREDICTOR_URL"] = "http://predictor.test/predict"

import json

import httpx
import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401  테이블 등록
from database.db import Base, SessionLocal, engine
from main import app
from models.course_groups import CourseGroup, Enrollment, TeacherAssignment
from models.questionnaires import Questionnaire
from models.users import ROLE_STUDENT, ROLE_TEACHER, StudentProfile, TeacherProfile, User
from services import recommendations
from services.predictor_client import PredictorHttpClient, get_predictor
from services.questionnaire import QUESTION_KEYS
from utils.security import hash_password

PASSWORD = "password123"

DEFAULT_PREDICTION = {
    "extraversion": 35,
    "conscientiousness": 25,
    "agreeableness": 12,
    "levels": {"extraversion": "Alto"},
    "model_version": "v2.1",
}

DEFAULT_WORKFLOW_OUTPUT = {
    "extraversion": {"recommendations": ["Lead a study group", "Present your findings"]},
    "agreeableness": {"recommendations": ["Pair with a classmate"]},
    "conscientiousness": {"recommendations": ["Keep a weekly planner"]},
}


class FakeService:
    """MockTransport 핸들러: 고정 응답을 돌려주고 받은 요청 본문을 기록"""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body
        self.error = None
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def predictor():
    return FakeService(body=dict(DEFAULT_PREDICTION))


@pytest.fixture
def workflow(monkeypatch):
    service = FakeService(body={"output": json.dumps(DEFAULT_WORKFLOW_OUTPUT)})
    client = recommendations.RecommendationWorkflowClient(
        url="http://workflow.test/webhook", timeout=5, transport=service.transport
    )
    monkeypatch.setattr(recommendations, "workflow_client", client)
    return service


@pytest.fixture
def client(predictor, workflow):
    app.dependency_overrides[get_predictor] = lambda: PredictorHttpClient(
        url="http://predictor.test/predict", timeout=5, transport=predictor.transport
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ==========================================================
# [데이터 생성 헬퍼]
# ==========================================================

def full_answers(value=3):
    return {key: value for key in QUESTION_KEYS}


def make_group(db, name="Algebra", section="7BM1", cohort="2025-1"):
    group = CourseGroup(name=name, section=section, cohort=cohort)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def make_questionnaire(db, version="ipip-30-v1"):
    questionnaire = Questionnaire(version=version, active=True)
    db.add(questionnaire)
    db.commit()
    db.refresh(questionnaire)
    return questionnaire


def make_student(db, enrollment_number="A001", email=None, group=None, first_name="Ana", last_name="Lopez"):
    user = User(
        email=email or f"{enrollment_number.lower()}@school.edu",
        password_hash=hash_password(PASSWORD),
        role=ROLE_STUDENT,
    )
    db.add(user)
    db.flush()
    db.add(StudentProfile(
        user_id=user.id,
        first_name=first_name,
        last_name=last_name,
        enrollment_number=enrollment_number,
    ))
    if group is not None:
        db.add(Enrollment(group_id=group.id, student_id=user.id))
    db.commit()
    db.refresh(user)
    return user


def make_teacher(db, employee_number="T001", group=None, first_name="Luis", last_name="Perez"):
    user = User(
        email=f"{employee_number.lower()}@school.edu",
        password_hash=hash_password(PASSWORD),
        role=ROLE_TEACHER,
    )
    db.add(user)
    db.flush()
    db.add(TeacherProfile(
        user_id=user.id,
        first_name=first_name,
        last_name=last_name,
        employee_number=employee_number,
    ))
    if group is not None:
        db.add(TeacherAssignment(teacher_id=user.id, group_id=group.id))
    db.commit()
    db.refresh(user)
    return user


def login(client, role, identifier, password=PASSWORD):
    r = client.post("/api/auth/login", json={"role": role, "identifier": identifier, "password": password})
    assert r.status_code == 200, r.text
    return r
