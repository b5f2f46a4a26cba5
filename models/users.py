from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.db import Base

ROLE_STUDENT = "student"
ROLE_TEACHER = "teacher"
ROLES = (ROLE_STUDENT, ROLE_TEACHER)


class User(Base):
    __tablename__ = "users"  # 로그인 계정 (학생/교사 공통)

    id = Column(Integer, primary_key=True, index=True)               # 사용자 고유 ID (PK)
    email = Column(String(255), unique=True, nullable=False)         # 이메일 (중복 불가)
    password_hash = Column(String(255), nullable=False)              # bcrypt 해시
    role = Column(String(20), nullable=False)                        # student / teacher
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # ✅ 역할별 프로필 (1:1)
    student_profile = relationship("StudentProfile", back_populates="user", uselist=False)
    teacher_profile = relationship("TeacherProfile", back_populates="user", uselist=False)

    @property
    def full_name(self):
        profile = self.student_profile if self.role == ROLE_STUDENT else self.teacher_profile
        if profile is None:
            return None
        return f"{profile.first_name or ''} {profile.last_name or ''}".strip() or None

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    enrollment_number = Column(String(50), unique=True, nullable=False)   # 학번 (로그인 식별자)

    user = relationship("User", back_populates="student_profile")


class TeacherProfile(Base):
    __tablename__ = "teacher_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    employee_number = Column(String(50), unique=True, nullable=False)     # 교직원 번호 (로그인 식별자)

    user = relationship("User", back_populates="teacher_profile")
