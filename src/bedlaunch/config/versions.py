"""Semantic version comparison for config schema stamps."""

from __future__ import annotations

DEV_VERSION = "dev"


def is_dev_version(version: str) -> bool:
    """Return whether ``version`` is the development sentinel."""
    return version.strip() == DEV_VERSION


def _normalize(version: str) -> list[str]:
    text = version.strip()
    if text in {"", "0"}:
        text = "0.0.0"
    if text[:1] in {"v", "V"} and text[1:2].isdigit():
        text = text[1:]
    return text.split(".")


def _compare_part(left: str, right: str) -> int:
    if left.isdigit() and right.isdigit():
        left_num, right_num = int(left), int(right)
        return (left_num > right_num) - (left_num < right_num)
    return (left > right) - (left < right)


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings.

    ``dev`` is newer than everything, empty and ``"0"`` mean ``0.0.0``, a
    leading ``v`` is ignored, and non-numeric components compare as text.

    Args:
        left: First version.
        right: Second version.

    Returns:
        ``-1`` when ``left < right``, ``0`` when equal, ``1`` when greater.
    """
    if left == right:
        return 0
    if is_dev_version(left):
        return 1
    if is_dev_version(right):
        return -1
    left_parts = _normalize(left)
    right_parts = _normalize(right)
    width = max(len(left_parts), len(right_parts))
    left_parts += ["0"] * (width - len(left_parts))
    right_parts += ["0"] * (width - len(right_parts))
    for left_part, right_part in zip(left_parts, right_parts, strict=True):
        result = _compare_part(left_part, right_part)
        if result:
            return result
    return 0


def version_lt(left: str, right: str) -> bool:
    """Return ``compare_versions(left, right) < 0``."""
    return compare_versions(left, right) < 0
