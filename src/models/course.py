"""Course database model. Courses are maintained by admins only."""

from sqlalchemy import Boolean, Column, Enum, Float, ForeignKey, Integer, String, Text

from schemas.enums import CourseLevel
from .base import Base


class CourseModel(Base):
    __tablename__ = "courses"

    course_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False)
    level = Column(Enum(CourseLevel), nullable=False, default=CourseLevel.BEGINNER)
    price = Column(Float, nullable=False)
    discount_price = Column(Float, nullable=True)
    duration = Column(String, nullable=True)  # hours
    max_students = Column(Integer, nullable=False, default=0)
    vendor_id = Column(
        String, ForeignKey("vendors.vendor_id"), index=True, nullable=True
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(String, nullable=False)
