"""
학생 그룹 가입 + 기존 프로필 복제

가입(Enrollment) 생성, 가장 최근 Profile 복제, 추천 복사를 한 트랜잭션으로 커밋한다.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.course_groups import CourseGroup, Enrollment
from models.profiles import Profile
from services.profiles import clone_profile, latest_profile_for_student
from utils.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    group: CourseGroup
    enrollment: Enrollment
    cloned_profile: Optional[Profile] = None

    @property
    def profile_cloned(self) -> bool:
        return self.cloned_profile is not None


def is_enrolled(db: Session, student_id: int, group_id: int) -> bool:
    return (
        db.query(Enrollment)
        .filter(Enrollment.group_id == group_id, Enrollment.student_id == student_id)
        .first()
        is not None
    )


def join_group(db: Session, student_id: int, group_id: int) -> JoinResult:
    group = db.get(CourseGroup, group_id)
    if group is None:
        raise NotFound("The requested group does not exist")

    if is_enrolled(db, student_id, group_id):
        raise ValidationFailed("You are already enrolled in this group")

    # 복제 원본은 가입 전 상태에서 조회 (모든 그룹 대상 최신 프로필)
    source = latest_profile_for_student(db, student_id)

    enrollment = Enrollment(group_id=group.id, student_id=student_id)
    cloned = None
    try:
        db.add(enrollment)
        if source is not None:
            cloned = clone_profile(db, source, group.id)
        db.commit()
    except IntegrityError:
        # 동시 요청으로 유니크 제약 위반
        db.rollback()
        raise ValidationFailed("You are already enrolled in this group")

    db.refresh(enrollment)
    logger.info(
        f"그룹 가입: student={student_id} group={group.id} "
        f"profile_cloned={cloned is not None}"
    )
    return JoinResult(group=group, enrollment=enrollment, cloned_profile=cloned)
