"""
교사용 그룹 현황 집계

- 그룹에 등록된 학생별 최신 Profile 기준으로 수준 표시
- 특성(3) × 수준(3) 인원 집계
- 페이지네이션/캐시 없음 (요청마다 전체 조회)
"""
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.course_groups import CourseGroup, Enrollment, TeacherAssignment
from models.profiles import Profile
from models.questionnaires import Response
from models.users import User
from services.scoring import LEVELS

SUMMARY_TRAITS = ("extraversion", "conscientiousness", "agreeableness")


def is_assigned(db: Session, teacher_id: int, group_id: int) -> bool:
    return (
        db.query(TeacherAssignment)
        .filter(TeacherAssignment.teacher_id == teacher_id, TeacherAssignment.group_id == group_id)
        .first()
        is not None
    )


def assign_teacher(db: Session, teacher_id: int, group_id: int) -> bool:
    """담당 연결 (새로 연결했으면 True, 이미 담당이면 False)"""
    if is_assigned(db, teacher_id, group_id):
        return False

    db.add(TeacherAssignment(teacher_id=teacher_id, group_id=group_id))
    try:
        db.commit()
    except IntegrityError:
        # 동시 요청으로 이미 연결됨
        db.rollback()
        return False
    return True


def empty_summary() -> Dict[str, Dict[str, int]]:
    return {trait: {level: 0 for level in LEVELS} for trait in SUMMARY_TRAITS}


def latest_profiles_by_student(db: Session, group_id: int) -> Dict[int, Profile]:
    """학생 id → 그룹 내 최신 Profile"""
    rows = (
        db.query(Profile, Response.student_id)
        .join(Response, Profile.response_id == Response.id)
        .filter(Profile.group_id == group_id)
        .order_by(Profile.created_at.asc(), Profile.id.asc())
        .all()
    )
    latest = {}
    for profile, student_id in rows:
        latest[student_id] = profile   # 오름차순이므로 마지막 값이 최신
    return latest


def build_group_roster(db: Session, group: CourseGroup) -> dict:
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.group_id == group.id)
        .order_by(Enrollment.id.asc())
        .all()
    )
    profiles = latest_profiles_by_student(db, group.id)
    summary = empty_summary()
    students: List[dict] = []

    for enrollment in enrollments:
        student: User = enrollment.student
        profile: Optional[Profile] = profiles.get(student.id)

        levels = {trait: None for trait in SUMMARY_TRAITS}
        if profile is not None:
            for trait in SUMMARY_TRAITS:
                level = getattr(profile, f"{trait}_level")
                levels[trait] = level
                if level in summary[trait]:
                    summary[trait][level] += 1

        students.append({
            "student_id": student.id,
            "full_name": student.full_name or "No student profile",
            "has_answered": profile is not None,
            "extraversion_level": levels["extraversion"],
            "conscientiousness_level": levels["conscientiousness"],
            "agreeableness_level": levels["agreeableness"],
        })

    return {
        "group": group.to_dict(),
        "students": students,
        "summary": summary,
    }


def profile_detail(profile: Profile) -> dict:
    response = profile.response
    questionnaire = response.questionnaire if response is not None else None
    return {
        "id": profile.id,
        "extraversion_score": profile.extraversion_score,
        "extraversion_level": profile.extraversion_level,
        "conscientiousness_score": profile.conscientiousness_score,
        "conscientiousness_level": profile.conscientiousness_level,
        "agreeableness_score": profile.agreeableness_score,
        "agreeableness_level": profile.agreeableness_level,
        "emotional_stability_score": profile.emotional_stability_score,
        "emotional_stability_level": profile.emotional_stability_level,
        "openness_score": profile.openness_score,
        "openness_level": profile.openness_level,
        "model_version": profile.model_version,
        "evaluated_at": response.evaluated_at.isoformat() if response is not None and response.evaluated_at else None,
        "questionnaire_version": questionnaire.version if questionnaire is not None else None,
    }


def group_counts(db: Session, group_id: int) -> dict:
    return {
        "student_count": db.query(Enrollment).filter(Enrollment.group_id == group_id).count(),
        "profile_count": db.query(Profile).filter(Profile.group_id == group_id).count(),
    }
