"""
Constraint parsing and style-preserving rewrites.

A Composer constraint such as ``^1.2`` carries two pieces of style that a
rewrite should keep: the prefix operator (``^``) and the numeric precision
(two segments). :func:`rewrite_constraint` renders a new version into the
same shape, so ``^1.2`` + ``2.5.3`` becomes ``^2.5``.

Compound constraints (``^1.0 || ^2.0``, ``>=1.0,<2.0``, ``>=1.0 <2.0``) are
not decomposed: they are replaced with ``^<new version>``.

Everything here is pure string work; nothing raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from composer_check_updates.utils.version_utils import normalize_version

_COMPOUND_PATTERN = re.compile(r"[|,\s]")
_CONSTRAINT_PATTERN = re.compile(r"^([~^>=<!]+|v)?(.*)$", re.DOTALL)

#: Operators whose leading symbol survives a rewrite. Order matters: ``>=``
#: must be tested before ``>``.
PRESERVED_OPERATORS: Tuple[str, ...] = ("^", "~", ">=", ">")

#: Precision values.
PRECISION_MAJOR = 1
PRECISION_MINOR = 2
PRECISION_PATCH = 3
PRECISION_PRERELEASE = 4


@dataclass(frozen=True)
class ParsedConstraint:
    """Shape of a single (non-compound) constraint.

    Attributes:
        operator: Leading operator run (``""``, ``"v"``, ``"^"``, ``"~"``,
            ``">="``, ``">"``, ``"<="``, ``"<"``, ``"!="``, ``"="``) or an
            unsupported run such as ``"~>"``.
        version: Remainder of the constraint after the operator.
        precision: 1 (major), 2 (major.minor), 3 (major.minor.patch) or
            4+ (with a prerelease slot).
        is_compound: The constraint contains ``|``, ``,`` or whitespace.
    """

    operator: str = ""
    version: str = ""
    precision: int = PRECISION_PATCH
    is_compound: bool = False

    def render(self, new_version: str) -> str:
        """Render *new_version* in this constraint's style."""
        if self.is_compound:
            return f"^{new_version}"

        formatted = format_version_to_precision(new_version, self.precision)
        return f"{_render_operator(self.operator)}{formatted}"


def is_compound_constraint(constraint: str) -> bool:
    """Return True for constraints containing ``|``, ``,`` or whitespace."""
    return bool(_COMPOUND_PATTERN.search(constraint))


def get_version_precision(version_part: str, constraint: str) -> int:
    """Count the significant segments of *version_part*.

    Empty and ``*`` segments do not count, neither does a prerelease suffix.
    When the full *constraint* contains a ``-`` the result is
    ``max(segments, 3) + 1`` so the rewrite keeps a prerelease slot.

    Examples:
        >>> get_version_precision("1.2", "^1.2")
        2
        >>> get_version_precision("2.*", "2.*")
        1
        >>> get_version_precision("1.0-beta", "1.0-beta")
        4
    """
    numeric = normalize_version(version_part.split("-", 1)[0])
    segments = [part for part in numeric.split(".") if part and part != "*"]
    precision = len(segments)

    if "-" in constraint:
        return max(precision, PRECISION_PATCH) + 1

    return max(PRECISION_MAJOR, precision)


def parse_constraint(constraint: str) -> ParsedConstraint:
    """Split *constraint* into operator, version remainder and precision.

    Examples:
        >>> parse_constraint("~2.0.1")
        ParsedConstraint(operator='~', version='2.0.1', precision=3, is_compound=False)
        >>> parse_constraint("^1.0 || ^2.0").is_compound
        True
    """
    if is_compound_constraint(constraint):
        return ParsedConstraint(version=constraint, is_compound=True)

    match = _CONSTRAINT_PATTERN.match(constraint)
    if match is None:
        return ParsedConstraint(version=constraint, is_compound=True)

    operator, version_part = match.group(1) or "", match.group(2) or ""
    return ParsedConstraint(
        operator=operator,
        version=version_part,
        precision=get_version_precision(version_part, constraint),
    )


def format_version_to_precision(version: str, precision: int) -> str:
    """Render *version* with the given number of segments.

    The numeric part is padded with zeros to three segments and then cut to
    one, two or three segments. The prerelease suffix is kept only when
    *precision* exceeds 3 and *version* has one.

    Examples:
        >>> format_version_to_precision("v2.5", 3)
        '2.5.0'
        >>> format_version_to_precision("2.5.3", 1)
        '2'
        >>> format_version_to_precision("2.0.0-RC1", 4)
        '2.0.0-RC1'
    """
    numeric, _, prerelease = normalize_version(version).partition("-")

    parts = numeric.split(".")
    while len(parts) < 3:
        parts.append("0")

    if precision == PRECISION_MAJOR:
        result = parts[0]
    elif precision == PRECISION_MINOR:
        result = ".".join(parts[:2])
    else:
        result = ".".join(parts[:3])

    if precision > PRECISION_PATCH and prerelease:
        result = f"{result}-{prerelease}"

    return result


def _render_operator(operator: str) -> str:
    if not operator:
        return ""
    if operator == "v":
        return "v"
    for symbol in PRESERVED_OPERATORS:
        if operator.startswith(symbol):
            return symbol
    # <=, <, != and = pin below or at a version; a rewrite becomes a caret
    return "^"


def rewrite_constraint(constraint: str, new_version: str) -> str:
    """Rewrite *constraint* so that it references *new_version*.

    Examples:
        >>> rewrite_constraint("^1.2", "1.5.0")
        '^1.5'
        >>> rewrite_constraint("~2.0.1", "2.3.7")
        '~2.3.7'
        >>> rewrite_constraint("<=1.0", "2.0.0")
        '^2.0'
        >>> rewrite_constraint("^1.0 || ^2.0", "3.1.0")
        '^3.1.0'
    """
    return parse_constraint(constraint).render(new_version)
