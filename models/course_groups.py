from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.db import Base


class CourseGroup(Base):
    __tablename__ = "course_groups"  # 과목-분반-기수 단위 (학생 수강 / 교사 담당)

    id = Column(Integer, primary_key=True, index=True)      # 그룹 고유 ID (PK)
    name = Column(String(150), nullable=False)              # 과목명
    section = Column(String(50))                            # 분반 코드 (예: 7BM1)
    cohort = Column(String(50))                             # 기수 / 학기 (예: 2025-1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # ==========================================================
    # [관계 설정]
    # ==========================================================
    enrollments = relationship("Enrollment", back_populates="group")
    teacher_assignments = relationship("TeacherAssignment", back_populates="group")
    profiles = relationship("Profile", back_populates="group")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "section": self.section,
            "cohort": self.cohort,
        }

    def __repr__(self):
        return f"<CourseGroup(id={self.id}, name={self.name}, section={self.section})>"


class TeacherAssignment(Base):
    __tablename__ = "teacher_assignments"  # 교사 ↔ 그룹 (N:M)

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    group_id = Column(Integer, ForeignKey("course_groups.id", ondelete="CASCADE"), nullable=False)

    teacher = relationship("User")
    group = relationship("CourseGroup", back_populates="teacher_assignments")

    __table_args__ = (
        UniqueConstraint("teacher_id", "group_id", name="uq_teacher_assignments_teacher_group"),
    )


class Enrollment(Base):
    __tablename__ = "enrollments"  # 학생 ↔ 그룹 (N:M, 학생은 여러 그룹 수강 가능)

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("course_groups.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    student = relationship("User")
    group = relationship("CourseGroup", back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint("group_id", "student_id", name="uq_enrollments_group_student"),
    )

    def __repr__(self):
        return f"<Enrollment(id={self.id}, group={self.group_id}, student={self.student_id})>"
