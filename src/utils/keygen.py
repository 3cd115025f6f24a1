"""Key and referral code generation.

Generators are pure: they draw from an injectable random source and clock and
touch no storage. ``generate_unique`` turns a generator into a practically
unique identifier by checking candidates against the store; the database's
unique constraints stay the final arbiter.
"""

import logging
import re
import secrets
import time
from typing import Callable, Optional

from config import KEY_GENERATION_MAX_ATTEMPTS
from core.exceptions import KeyGenerationExhaustedError

logger = logging.getLogger(__name__)

VENDOR_KEY_PREFIX = "VND_"
MENTOR_KEY_PREFIX = "MNT_"
REFERRAL_CODE_LENGTH = 13

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")

RandomHex = Callable[[int], str]


def _sanitize(value: object) -> str:
    return _NON_ALNUM.sub("", str(value or ""))


def generate_vendor_key(random_hex: RandomHex = secrets.token_hex) -> str:
    """Return ``VND_`` followed by 16 uppercase hex characters."""
    return VENDOR_KEY_PREFIX + random_hex(8).upper()


def generate_mentor_key(random_hex: RandomHex = secrets.token_hex) -> str:
    """Return ``MNT_`` followed by 16 uppercase hex characters."""
    return MENTOR_KEY_PREFIX + random_hex(8).upper()


def generate_referral_code(
    name: Optional[str],
    entity_id: object,
    random_hex: RandomHex = secrets.token_hex,
    now_ms: Optional[int] = None,
) -> str:
    """Build a 13-character referral code.

    Layout: 3-char name prefix, 3-char id suffix, 4 random hex chars and the
    last 3 digits of the millisecond clock, all uppercase. Short or empty
    name and id fragments are padded with ``X``.

    Args:
        name: Display name of the code owner (mentor or vendor company).
        entity_id: Id of the owning mentor or vendor.
        random_hex: Random source returning ``2 * n`` hex chars for ``n`` bytes.
        now_ms: Clock override in milliseconds since the epoch.

    Returns:
        The referral code.
    """
    name_prefix = (_sanitize(name)[:3] + "XXX")[:3]
    id_suffix = ("XXX" + _sanitize(entity_id))[-3:]
    random_part = random_hex(2)
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    timestamp = str(now_ms).zfill(3)[-3:]
    return f"{name_prefix}{id_suffix}{random_part}{timestamp}".upper()


def generate_unique(
    generator: Callable[[], str],
    exists: Callable[[str], bool],
    max_attempts: int = KEY_GENERATION_MAX_ATTEMPTS,
    label: str = "key",
) -> str:
    """Generate a value that ``exists`` does not know yet.

    Args:
        generator: Produces a candidate.
        exists: Lookup against the store.
        max_attempts: Upper bound on candidates tried.
        label: Name used in log messages.

    Returns:
        The first candidate not present in the store.

    Raises:
        KeyGenerationExhaustedError: If every candidate collided.
    """
    for attempt in range(1, max_attempts + 1):
        candidate = generator()
        if not exists(candidate):
            return candidate
        logger.warning(
            "Generated %s collided with an existing one (attempt %d/%d)",
            label,
            attempt,
            max_attempts,
        )
    logger.error("Gave up generating a unique %s after %d attempts", label, max_attempts)
    raise KeyGenerationExhaustedError(
        f"Failed to generate unique {label}. Please try again."
    )
