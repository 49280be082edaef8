"""Offline license validation and free-tier feature gating."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from typing import Literal

from story_sync.sync.models import SyncOptions

LICENSE_ENV_VAR = "STORY_SYNC_LICENSE"
FREE_TIER_LIMIT = 5

_KEY_PATTERN = re.compile(r"^FORGE-PRO-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")
_CHECKSUM_MODULUS = 36**4
_BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

Tier = Literal["free", "pro"]


@dataclass(slots=True, frozen=True)
class LicenseStatus:
    """Result of validating a license key."""

    valid: bool
    tier: Tier
    max_components: int | None

    @property
    def is_pro(self) -> bool:
        """Return True for the unlimited tier."""
        return self.tier == "pro"


FREE_TIER = LicenseStatus(valid=True, tier="free", max_components=FREE_TIER_LIMIT)


def validate_license(key: str | None = None) -> LicenseStatus:
    """Validate `key`, falling back to the environment variable.

    No key yields the free tier. A malformed key or a key whose checksum does
    not match is reported invalid and also yields the free tier.
    """
    candidate = key or os.environ.get(LICENSE_ENV_VAR)
    if not candidate:
        return FREE_TIER
    candidate = candidate.strip()
    if not _KEY_PATTERN.match(candidate) or not verify_checksum(candidate):
        return LicenseStatus(valid=False, tier="free", max_components=FREE_TIER_LIMIT)
    return LicenseStatus(valid=True, tier="pro", max_components=None)


def verify_checksum(key: str) -> bool:
    """Check that the last key segment encodes the two middle segments."""
    parts = key.split("-")
    if len(parts) != 5:
        return False
    _, _, first, second, checksum = parts
    return checksum == key_checksum(first + second)


def key_checksum(data: str) -> str:
    """Return the four-character base36 checksum of `data`."""
    total = sum(ord(char) * (index + 1) for index, char in enumerate(data))
    return _to_base36(total % _CHECKSUM_MODULUS).rjust(4, "0")[-4:]


def apply_license(options: SyncOptions, status: LicenseStatus) -> tuple[SyncOptions, list[str]]:
    """Restrict options to what the license tier allows.

    Returns the adjusted options and one warning per feature switched off.
    """
    if status.is_pro:
        return options, []
    warnings: list[str] = []
    if not status.valid:
        warnings.append("License key is invalid; continuing on the free tier")
    if options.tests:
        warnings.append("Test generation disabled (Free Tier)")
    if options.docs:
        warnings.append("Docs generation disabled (Free Tier)")
    limit = status.max_components
    if options.max_components is not None and limit is not None:
        limit = min(limit, options.max_components)
    adjusted = replace(options, tests=False, docs=False, max_components=limit)
    return adjusted, warnings


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))
