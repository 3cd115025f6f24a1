"""
Unit tests for key and referral code generation.
"""
import itertools
import re

import pytest

from core.exceptions import KeyGenerationExhaustedError
from schemas.enums import ErrorKind
from utils.keygen import (
    generate_mentor_key,
    generate_referral_code,
    generate_unique,
    generate_vendor_key,
)


def fixed_hex(value: str):
    """Random source that always returns ``value``"""
    return lambda n: value


class TestKeyFormats:
    """Tests for vendor and mentor key formats"""

    def test_vendor_key_format(self):
        assert re.fullmatch(r"VND_[0-9A-F]{16}", generate_vendor_key())

    def test_mentor_key_format(self):
        assert re.fullmatch(r"MNT_[0-9A-F]{16}", generate_mentor_key())

    def test_vendor_keys_are_practically_unique(self):
        """10k generated vendor keys should not collide"""
        keys = {generate_vendor_key() for _ in range(10_000)}
        assert len(keys) == 10_000

    def test_injected_random_source(self):
        assert generate_vendor_key(fixed_hex("00ff00ff00ff00ff")) == "VND_00FF00FF00FF00FF"


class TestReferralCode:
    """Tests for generate_referral_code"""

    def test_layout(self):
        code = generate_referral_code(
            "John Doe", "507f1f77bcf86cd799439011", fixed_hex("a1b2"), now_ms=1700000000123
        )
        assert code == "JOH011A1B2123"
        assert len(code) == 13

    def test_short_and_empty_inputs_are_padded(self):
        """Empty name and id should be padded with X, never raise"""
        code = generate_referral_code("", "", fixed_hex("0000"), now_ms=5)
        assert code == "XXXXXX0000005"

    def test_short_name_and_id(self):
        code = generate_referral_code("Al", "7", fixed_hex("beef"), now_ms=42)
        assert code == "ALXXX7BEEF042"

    def test_non_alphanumerics_are_dropped(self):
        code = generate_referral_code("O'Neil-Smith", "ab-c_d", fixed_hex("1234"), now_ms=999)
        assert code.startswith("ONE")
        assert code[3:6] == "BCD"

    def test_default_sources(self):
        code = generate_referral_code("Maria", "abcdef")
        assert re.fullmatch(r"MARDEF[0-9A-F]{4}[0-9]{3}", code)


class TestGenerateUnique:
    """Tests for the bounded uniqueness retry loop"""

    def test_first_candidate_accepted(self):
        assert generate_unique(lambda: "A", lambda c: False) == "A"

    def test_collision_is_retried(self):
        """A colliding candidate should be replaced by the next one"""
        candidates = iter(["TAKEN", "FREE"])
        seen = []

        def exists(candidate):
            seen.append(candidate)
            return candidate == "TAKEN"

        assert generate_unique(lambda: next(candidates), exists) == "FREE"
        assert seen == ["TAKEN", "FREE"]

    def test_exhaustion_raises(self):
        counter = itertools.count()

        def generator():
            next(counter)
            return "TAKEN"

        with pytest.raises(KeyGenerationExhaustedError) as exc_info:
            generate_unique(generator, lambda c: True, max_attempts=5)

        assert next(counter) == 5
        assert exc_info.value.kind == ErrorKind.EXHAUSTED
        assert exc_info.value.status_code == 500
