import argparse

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from models.questionnaires import Questionnaire  # ✅ 모델 import

DEFAULT_VERSION = "ipip-30-v1"  # ✅ 30문항 IPIP 기반 설문


def seed_questionnaire(version: str = DEFAULT_VERSION, deactivate_others: bool = False) -> Questionnaire:
    init_db()
    db: Session = SessionLocal()
    try:
        if deactivate_others:
            db.query(Questionnaire).filter(Questionnaire.version != version).update({"active": False})

        questionnaire = db.query(Questionnaire).filter(Questionnaire.version == version).first()
        if questionnaire is None:
            questionnaire = Questionnaire(version=version, active=True)
            db.add(questionnaire)
        else:
            questionnaire.active = True

        db.commit()
        db.refresh(questionnaire)
    finally:
        db.close()

    print(f"✅ 활성 설문 준비 완료: {questionnaire.version} (id={questionnaire.id})")
    return questionnaire


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="활성 설문 버전 생성/활성화")
    parser.add_argument("--version", default=DEFAULT_VERSION)
    parser.add_argument("--deactivate-others", action="store_true")
    args = parser.parse_args()
    seed_questionnaire(args.version, args.deactivate_others)
