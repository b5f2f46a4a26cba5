from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.db import Base


class Questionnaire(Base):
    __tablename__ = "questionnaires"  # 설문 버전 정의

    id = Column(Integer, primary_key=True, index=True)
    version = Column(String(50), unique=True, nullable=False)    # 예: ipip-30-v1
    active = Column(Boolean, default=False, nullable=False)      # 활성 여부 (단일 활성 보장 없음)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    responses = relationship("Response", back_populates="questionnaire")


class Response(Base):
    __tablename__ = "responses"  # 학생의 원시 응답 (설문당 학생 1건)

    id = Column(Integer, primary_key=True, index=True)
    questionnaire_id = Column(Integer, ForeignKey("questionnaires.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    raw_answers = Column(JSON, nullable=False)                   # {"ordered": [...], "by_question": {...}}
    evaluated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    questionnaire = relationship("Questionnaire", back_populates="responses")
    student = relationship("User")
    profiles = relationship("Profile", back_populates="response")

    __table_args__ = (
        UniqueConstraint("questionnaire_id", "student_id", name="uq_responses_questionnaire_student"),
    )

    def __repr__(self):
        return f"<Response(id={self.id}, questionnaire={self.questionnaire_id}, student={self.student_id})>"
