"""
Update data models for composer-check-updates.

This module defines the declared-dependency input record, the target
policy, and :class:`PackageUpdate`, the value object every presentation
layer (table, JSON, interactive picker) and the manifest writer consume.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Optional

from composer_check_updates.exceptions import InvalidTargetError
from composer_check_updates.utils.constraint_utils import rewrite_constraint
from composer_check_updates.utils.version_utils import (
    UpdateType,
    is_version_newer,
    normalize_version,
)


class TargetPolicy(str, Enum):
    """How far an upgrade may move away from the current version."""

    LATEST = "latest"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | TargetPolicy") -> "TargetPolicy":
        """Return the policy named *value*.

        Raises:
            InvalidTargetError: *value* is not latest, minor or patch.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidTargetError(str(value)) from None


@dataclass(frozen=True)
class Dependency:
    """A dependency as declared in ``composer.json``.

    Attributes:
        name: Package name (``vendor/package``).
        constraint: Constraint string exactly as declared.
        is_dev: Declared under ``require-dev``.
        installed_version: Version recorded in ``composer.lock``, if any.
    """

    name: str
    constraint: str
    is_dev: bool = False
    installed_version: Optional[str] = None


@dataclass(frozen=True)
class PackageUpdate:
    """An available upgrade for one declared dependency.

    ``current_version`` is always strictly older than ``latest_version``;
    use :meth:`create` to build instances from untrusted input. The
    rewritten constraint is computed on each access of
    :attr:`new_constraint` and never stored.

    Attributes:
        name: Package name.
        current_constraint: Constraint as declared.
        current_version: Installed (or constraint-derived) version, without
            a leading ``v``.
        latest_version: Version chosen for the active target policy.
        update_type: Magnitude of the upgrade.
        is_dev: Declared under ``require-dev``.
    """

    name: str
    current_constraint: str
    current_version: str
    latest_version: str
    update_type: UpdateType
    is_dev: bool = False

    @classmethod
    def create(
        cls,
        name: str,
        current_constraint: str,
        current_version: str,
        latest_version: str,
        update_type: UpdateType,
        is_dev: bool = False,
    ) -> Optional["PackageUpdate"]:
        """Build an update, or return ``None`` when it would not be an upgrade."""
        if not is_version_newer(current_version, latest_version):
            return None

        return cls(
            name=name,
            current_constraint=current_constraint,
            current_version=normalize_version(current_version),
            latest_version=latest_version,
            update_type=update_type,
            is_dev=is_dev,
        )

    @property
    def new_constraint(self) -> str:
        """``current_constraint`` rewritten to reference ``latest_version``."""
        return rewrite_constraint(self.current_constraint, self.latest_version)

    def has_update(self) -> bool:
        """Return True if ``latest_version`` is newer than ``current_version``."""
        return is_version_newer(self.current_version, self.latest_version)

    @property
    def is_noop(self) -> bool:
        """True when the rewrite would leave the declared constraint unchanged."""
        return self.new_constraint == self.current_constraint

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the JSON shape printed by ``ccu check --format json``."""
        return {
            "name": self.name,
            "current": self.current_constraint,
            "currentVersion": self.current_version,
            "latest": self.latest_version,
            "new": self.new_constraint,
            "type": self.update_type.value,
            "isDev": self.is_dev,
        }

    def __str__(self) -> str:
        return f"{self.name} {self.current_constraint} → {self.new_constraint}"
