"""Course catalog maintenance. Writes are reserved to admins."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from core.exceptions import CourseNotFoundError, ForbiddenError, ValidationError
from models.course import CourseModel
from models.user import UserModel
from schemas.enums import CourseLevel, Role
from utils.timeutils import now_iso

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "category",
    "level",
    "price",
    "discount_price",
    "duration",
    "max_students",
    "is_active",
)

# Fields an update may clear by sending null
CLEARABLE_FIELDS = ("description", "discount_price", "duration")


def effective_price(course: CourseModel) -> float:
    """Price a student pays: the discount price when set, else the list price."""
    if course.discount_price is not None:
        return course.discount_price
    return course.price


class CourseManager:
    def __init__(self, db: Session):
        self.db = db

    def get_course(self, course_id: str) -> CourseModel:
        course = (
            self.db.query(CourseModel).filter(CourseModel.course_id == course_id).first()
        )
        if course is None:
            raise CourseNotFoundError()
        return course

    def list_courses(self, active_only: bool = False) -> List[CourseModel]:
        query = self.db.query(CourseModel)
        if active_only:
            query = query.filter(CourseModel.is_active.is_(True))
        return query.order_by(CourseModel.created_at.desc()).all()

    def list_active_for_vendor(self, vendor_id: str) -> List[CourseModel]:
        """Active courses offered by ``vendor_id``."""
        return (
            self.db.query(CourseModel)
            .filter(
                CourseModel.vendor_id == vendor_id,
                CourseModel.is_active.is_(True),
            )
            .order_by(CourseModel.created_at.desc())
            .all()
        )

    def create_course(
        self,
        admin: UserModel,
        title: str,
        category: str,
        price: float,
        description: Optional[str] = None,
        level: CourseLevel = CourseLevel.BEGINNER,
        discount_price: Optional[float] = None,
        duration: Optional[str] = None,
        max_students: int = 0,
        vendor_id: Optional[str] = None,
    ) -> CourseModel:
        if admin.role != Role.ADMIN:
            raise ForbiddenError("Only admins can manage courses")
        if discount_price is not None and discount_price > price:
            raise ValidationError("discount_price cannot exceed price")

        course = CourseModel(
            course_id=uuid.uuid4().hex,
            title=title.strip(),
            description=description,
            category=category,
            level=CourseLevel(level),
            price=price,
            discount_price=discount_price,
            duration=duration,
            max_students=max_students,
            vendor_id=vendor_id,
            is_active=True,
            created_at=now_iso(),
        )
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        logger.info("Created course %s (%s)", course.course_id, course.title)
        return course

    def update_course(
        self, admin: UserModel, course_id: str, changes: Dict[str, Any]
    ) -> CourseModel:
        """Apply a partial update to a course.

        Args:
            admin: Acting admin identity.
            course_id: Course to update.
            changes: Field values keyed by name; unknown keys are ignored.
                Only ``CLEARABLE_FIELDS`` may be set to None.

        Returns:
            The updated course.

        Raises:
            ValidationError: If a required field is nulled or the discount
                ends up above the price.
        """
        if admin.role != Role.ADMIN:
            raise ForbiddenError("Only admins can manage courses")
        cleared = sorted(
            field
            for field in UPDATABLE_FIELDS
            if field in changes
            and changes[field] is None
            and field not in CLEARABLE_FIELDS
        )
        if cleared:
            raise ValidationError(f"{cleared[0]} cannot be null")

        course = self.get_course(course_id)
        for field in UPDATABLE_FIELDS:
            if field in changes:
                setattr(course, field, changes[field])

        if course.discount_price is not None and course.discount_price > course.price:
            self.db.rollback()
            raise ValidationError("discount_price cannot exceed price")

        self.db.commit()
        self.db.refresh(course)
        logger.info("Updated course %s: %s", course_id, ", ".join(sorted(changes)))
        return course
