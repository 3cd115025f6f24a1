"""Student admission through referral codes."""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from core.exceptions import StudentNotFoundError, ValidationError
from models.student import StudentModel
from models.user import UserModel
from utils.referral_manager import ReferralManager
from utils.timeutils import now_iso

logger = logging.getLogger(__name__)


class StudentManager:
    """Admits students and resolves student profiles."""

    def __init__(self, db: Session, referral_manager: Optional[ReferralManager] = None):
        self.db = db
        self.referral_manager = referral_manager or ReferralManager(db)

    def get_student_for_user(self, user_id: str) -> StudentModel:
        student = (
            self.db.query(StudentModel).filter(StudentModel.user_id == user_id).first()
        )
        if student is None:
            raise StudentNotFoundError()
        return student

    def find_student_for_user(self, user_id: str) -> Optional[StudentModel]:
        return self.db.query(StudentModel).filter(StudentModel.user_id == user_id).first()

    def admit_student(self, referral_code: str, identity: UserModel) -> StudentModel:
        """Create the student profile for ``identity`` from a referral code.

        The code goes through full ledger validation and is consumed once.
        The student is assigned to the code's mentor and keeps the code as an
        audit trail. Joins the caller's transaction.

        Args:
            referral_code: Code presented at registration.
            identity: Newly created student identity.

        Returns:
            The new student profile.

        Raises:
            InvalidReferralCodeError: Or one of its subclasses, when the code
                cannot be used.
            ValidationError: If the code is not tied to a mentor.
        """
        code = self.referral_manager.validate(referral_code)
        if code.mentor_id is None:
            raise ValidationError("This referral code cannot be used to register a student")
        code = self.referral_manager.consume(code.code)

        student = StudentModel(
            student_id=uuid.uuid4().hex,
            user_id=identity.user_id,
            mentor_id=code.mentor_id,
            referral_code=code.code,
            is_enrolled=False,
            created_at=now_iso(),
        )
        self.db.add(student)
        self.db.flush()
        logger.info(
            "Admitted student %s under mentor %s with code %s",
            student.student_id,
            student.mentor_id,
            code.code,
        )
        return student
