"""SQLAlchemy ORM 모델 모음 (테이블 등록용)"""
from models.users import User, StudentProfile, TeacherProfile
from models.course_groups import CourseGroup, TeacherAssignment, Enrollment
from models.questionnaires import Questionnaire, Response
from models.profiles import Profile, Recommendation

__all__ = [
    "User",
    "StudentProfile",
    "TeacherProfile",
    "CourseGroup",
    "TeacherAssignment",
    "Enrollment",
    "Questionnaire",
    "Response",
    "Profile",
    "Recommendation",
]
