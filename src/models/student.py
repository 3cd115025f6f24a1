from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base


class StudentModel(Base):
    __tablename__ = "students"

    student_id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.user_id"), unique=True, nullable=False)
    mentor_id = Column(
        String, ForeignKey("mentors.mentor_id"), index=True, nullable=False
    )
    # Code used at signup, kept as an audit trail
    referral_code = Column(String, nullable=False)
    is_enrolled = Column(Boolean, nullable=False, default=False)
    created_at = Column(String, nullable=False)

    mentor = relationship("MentorModel")
    enrolled_courses = relationship(
        "StudentCourseModel",
        back_populates="student",
        order_by="StudentCourseModel.id",
        cascade="all, delete-orphan",
    )


class StudentCourseModel(Base):
    __tablename__ = "student_courses"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "course_id",
            name="uq_student_courses_student_course",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(
        String,
        ForeignKey("students.student_id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    course_id = Column(String, ForeignKey("courses.course_id"), nullable=False)
    enrolled_at = Column(String, nullable=False)

    student = relationship("StudentModel", back_populates="enrolled_courses")
    course = relationship("CourseModel")
