"""Outbound notifications for email verification.

Delivery is not part of this service; the default mailer only records that a
code was issued. Deployments plug in a real transport by overriding the
``get_otp_mailer`` dependency.
"""

import logging

logger = logging.getLogger(__name__)


class OTPMailer:
    def send_verification_code(self, email: str, code: str) -> None:
        logger.info("Verification code issued for %s", email)
        logger.debug("Verification code for %s: %s", email, code)
