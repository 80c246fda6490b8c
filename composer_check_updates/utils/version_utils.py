"""
Semantic-version helpers for composer-check-updates.

Composer tags are looser than strict SemVer: a leading ``v`` is common,
minor and patch may be missing (``2``, ``2.1``) and prerelease suffixes
follow a dash (``1.0.0-RC1``). Parsing here accepts exactly that shape and
nothing more; anything without a leading digit run is "absent" and callers
fall back to conservative defaults instead of failing.
"""

from __future__ import annotations

import re
import functools
from enum import Enum
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

_VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-(.+))?")


class UpdateType(str, Enum):
    """Magnitude of an available upgrade."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    PRERELEASE = "prerelease"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ParsedVersion:
    """Numeric components of a version string.

    Attributes:
        major: Major number.
        minor: Minor number, ``0`` when absent from the source string.
        patch: Patch number, ``0`` when absent from the source string.
        prerelease: Text after the first ``-``; empty when there is none.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    prerelease: str = ""

    @property
    def release(self) -> Tuple[int, int, int]:
        return self.major, self.minor, self.patch

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)


def normalize_version(version: str) -> str:
    """Strip leading ``v``/``V`` characters. Numeric segments are untouched."""
    return version.lstrip("vV")


def parse_version(version: str) -> Optional[ParsedVersion]:
    """Parse ``major[.minor[.patch]][-prerelease]`` after stripping ``v``.

    Returns:
        A :class:`ParsedVersion`, or ``None`` when the string does not
        start with a digit sequence.

    Examples:
        >>> parse_version("v2.1")
        ParsedVersion(major=2, minor=1, patch=0, prerelease='')
        >>> parse_version("1.0.0-beta.2").prerelease
        'beta.2'
        >>> parse_version("dev-main") is None
        True
    """
    match = _VERSION_PATTERN.match(normalize_version(version))
    if not match:
        return None

    major, minor, patch, prerelease = match.groups()
    return ParsedVersion(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
        prerelease=prerelease or "",
    )


def _compare_identifiers(left: str, right: str) -> int:
    """Compare two prerelease identifiers following SemVer 2.0 §11."""
    left_numeric = left.isdigit()
    right_numeric = right.isdigit()

    if left_numeric and right_numeric:
        a, b = int(left), int(right)
        return (a > b) - (a < b)
    if left_numeric:
        return -1
    if right_numeric:
        return 1
    return (left > right) - (left < right)


def _compare_prerelease(left: str, right: str) -> int:
    """Order prerelease strings; an empty string (a release) sorts highest."""
    if left == right:
        return 0
    if not left:
        return 1
    if not right:
        return -1

    left_parts = left.split(".")
    right_parts = right.split(".")
    for a, b in zip(left_parts, right_parts):
        result = _compare_identifiers(a, b)
        if result:
            return result

    return (len(left_parts) > len(right_parts)) - (len(left_parts) < len(right_parts))


def compare_parsed(left: ParsedVersion, right: ParsedVersion) -> int:
    """Compare two parsed versions. Returns -1, 0 or 1."""
    if left.release != right.release:
        return -1 if left.release < right.release else 1
    return _compare_prerelease(left.prerelease, right.prerelease)


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings under semantic-version precedence.

    Returns ``-1`` when *left* is older, ``0`` when equal and ``1`` when
    newer. Strings that do not parse sort below every parseable version
    and are equal to one another, so the ordering stays total.

    Examples:
        >>> compare_versions("1.2.0", "1.10.0")
        -1
        >>> compare_versions("2.0.0", "2.0.0-rc1")
        1
        >>> compare_versions("v1.0", "1.0.0")
        0
    """
    parsed_left = parse_version(left)
    parsed_right = parse_version(right)

    if parsed_left is None or parsed_right is None:
        return (parsed_left is not None) - (parsed_right is not None)

    return compare_parsed(parsed_left, parsed_right)


def version_sort_key(
    extract: Optional[Callable[[Any], str]] = None,
) -> Callable[[Any], Any]:
    """Return a ``sorted`` key that orders by :func:`compare_versions`.

    Args:
        extract: Optional accessor turning an element into a version string.
    """
    get = extract or (lambda value: value)

    def _cmp(a: Any, b: Any) -> int:
        return compare_versions(get(a), get(b))

    return functools.cmp_to_key(_cmp)


def sort_versions(
    versions: List[str],
    *,
    descending: bool = True,
) -> List[str]:
    """Sort version strings; the sort is stable among equal versions."""
    return sorted(versions, key=version_sort_key(), reverse=descending)


def is_version_newer(current_version: str, latest_version: str) -> bool:
    """Return True if *latest_version* is strictly newer than *current_version*.

    Only a leading ``v``/``V`` is normalised away before comparing.
    """
    return (
        compare_versions(
            normalize_version(current_version),
            normalize_version(latest_version),
        )
        < 0
    )


def get_update_type(
    current_version: Union[str, ParsedVersion],
    latest_version: Union[str, ParsedVersion],
) -> UpdateType:
    """Classify the upgrade from *current_version* to *latest_version*.

    Rules are evaluated in order and the first match wins:

    1. current major is ``0`` or latest major is greater → ``major``
    2. latest minor is greater → ``minor``
    3. latest patch is greater → ``patch``
    4. current is a prerelease and latest is not → ``patch``
    5. otherwise → ``prerelease``

    Unparseable input is classified as ``patch``.

    Examples:
        >>> get_update_type("1.2.3", "2.0.0")
        <UpdateType.MAJOR: 'major'>
        >>> get_update_type("0.9.0", "0.9.1")
        <UpdateType.MAJOR: 'major'>
        >>> get_update_type("1.0.0-rc1", "1.0.0")
        <UpdateType.PATCH: 'patch'>
    """
    current = (
        current_version
        if isinstance(current_version, ParsedVersion)
        else parse_version(current_version)
    )
    latest = (
        latest_version
        if isinstance(latest_version, ParsedVersion)
        else parse_version(latest_version)
    )

    if current is None or latest is None:
        return UpdateType.PATCH

    # 0.x releases make no compatibility promise
    if current.major == 0 or latest.major > current.major:
        return UpdateType.MAJOR

    if latest.minor > current.minor:
        return UpdateType.MINOR

    if latest.patch > current.patch:
        return UpdateType.PATCH

    if current.prerelease and not latest.prerelease:
        return UpdateType.PATCH

    return UpdateType.PRERELEASE
