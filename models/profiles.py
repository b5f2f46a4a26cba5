from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.db import Base

TRAITS = (
    "extraversion",
    "agreeableness",
    "conscientiousness",
    "emotional_stability",
    "openness",
)


class Profile(Base):
    __tablename__ = "profiles"  # 응답에서 도출된 성격 특성 결과 (그룹 단위)

    id = Column(Integer, primary_key=True, index=True)
    response_id = Column(Integer, ForeignKey("responses.id", ondelete="CASCADE"), nullable=False)
    group_id = Column(Integer, ForeignKey("course_groups.id", ondelete="CASCADE"), nullable=False)

    # ✅ 특성 점수 (emotional_stability / openness 는 현재 예측기가 채우지 않음)
    extraversion_score = Column(Float)
    agreeableness_score = Column(Float)
    conscientiousness_score = Column(Float)
    emotional_stability_score = Column(Float)
    openness_score = Column(Float)

    # ✅ 특성 수준 (low / medium / high)
    extraversion_level = Column(String(10))
    agreeableness_level = Column(String(10))
    conscientiousness_level = Column(String(10))
    emotional_stability_level = Column(String(10))
    openness_level = Column(String(10))

    model_version = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    response = relationship("Response", back_populates="profiles")
    group = relationship("CourseGroup", back_populates="profiles")
    recommendations = relationship(
        "Recommendation",
        back_populates="profile",
        order_by="Recommendation.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_profiles_group", "group_id"),
        Index("idx_profiles_response", "response_id"),
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, response={self.response_id}, group={self.group_id})>"


class Recommendation(Base):
    __tablename__ = "recommendations"  # 특성별 학습 전략 추천 문구

    id = Column(Integer, primary_key=True, index=True)
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    trait = Column(String(30), nullable=False)
    strategy = Column(Text)
    soft_skill = Column(Text)
    source = Column(String(50))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="recommendations")

    def to_dict(self):
        return {
            "id": self.id,
            "trait": self.trait,
            "strategy": self.strategy,
            "soft_skill": self.soft_skill,
            "source": self.source,
        }
