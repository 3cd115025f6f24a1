"""Course schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import CourseLevel


class Course(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: str
    title: str
    description: Optional[str] = None
    category: str
    level: CourseLevel
    price: float
    discount_price: Optional[float] = None
    duration: Optional[str] = None
    max_students: int = 0
    vendor_id: Optional[str] = None
    is_active: bool
    created_at: str


class CreateCourseRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    category: str = Field(min_length=1)
    level: CourseLevel = CourseLevel.BEGINNER
    price: float = Field(ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[str] = None
    max_students: int = Field(default=0, ge=0)
    vendor_id: Optional[str] = None


class UpdateCourseRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    level: Optional[CourseLevel] = None
    price: Optional[float] = Field(default=None, ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[str] = None
    max_students: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
