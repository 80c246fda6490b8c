"""Unit tests for composer_check_updates.models.update.

Test Coverage:
- TargetPolicy parsing
- Dependency defaults
- PackageUpdate construction guard, derived constraint and no-op detection
- JSON serialization shape
"""

from __future__ import annotations

import dataclasses

import pytest

from composer_check_updates.exceptions import InvalidTargetError
from composer_check_updates.models import Dependency, PackageUpdate, TargetPolicy, UpdateType


@pytest.mark.unit
class TestTargetPolicy:
    """Tests for TargetPolicy."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("latest", TargetPolicy.LATEST),
            ("minor", TargetPolicy.MINOR),
            ("PATCH", TargetPolicy.PATCH),
            (TargetPolicy.MINOR, TargetPolicy.MINOR),
        ],
    )
    def test_parse(self, value: str, expected: TargetPolicy) -> None:
        assert TargetPolicy.parse(value) is expected

    def test_parse_invalid(self) -> None:
        with pytest.raises(InvalidTargetError) as exc_info:
            TargetPolicy.parse("greatest")

        assert exc_info.value.value == "greatest"
        assert "latest, minor, or patch" in str(exc_info.value)

    def test_str(self) -> None:
        assert str(TargetPolicy.PATCH) == "patch"


@pytest.mark.unit
class TestDependency:
    """Tests for Dependency."""

    def test_defaults(self) -> None:
        dep = Dependency("symfony/console", "^5.4")

        assert dep.is_dev is False
        assert dep.installed_version is None

    def test_frozen(self) -> None:
        dep = Dependency("symfony/console", "^5.4")
        with pytest.raises(dataclasses.FrozenInstanceError):
            dep.constraint = "^6.0"  # type: ignore[misc]


@pytest.mark.unit
class TestPackageUpdate:
    """Tests for PackageUpdate."""

    def test_create(self) -> None:
        """Test create normalizes the current version and derives the constraint."""
        update = PackageUpdate.create(
            name="symfony/console",
            current_constraint="^5.4",
            current_version="v5.4.21",
            latest_version="7.0.0",
            update_type=UpdateType.MAJOR,
        )

        assert update is not None
        assert update.current_version == "5.4.21"
        assert update.new_constraint == "^7.0"
        assert update.has_update()
        assert not update.is_noop

    @pytest.mark.parametrize("latest", ["5.4.21", "5.4.0", "v5.4.21"])
    def test_create_rejects_non_upgrade(self, latest: str) -> None:
        assert (
            PackageUpdate.create("a/a", "^5.4", "5.4.21", latest, UpdateType.PATCH) is None
        )

    def test_is_noop(self) -> None:
        update = PackageUpdate("a/a", "^1.2", "1.2.3", "1.2.5", UpdateType.PATCH)
        assert update.is_noop

    def test_to_json(self) -> None:
        update = PackageUpdate(
            "phpunit/phpunit", "^9.6", "9.6.13", "10.5.0", UpdateType.MAJOR, is_dev=True
        )

        assert update.to_json() == {
            "name": "phpunit/phpunit",
            "current": "^9.6",
            "currentVersion": "9.6.13",
            "latest": "10.5.0",
            "new": "^10.5",
            "type": "major",
            "isDev": True,
        }

    def test_str(self) -> None:
        update = PackageUpdate("a/a", "~7.8.0", "7.8.0", "7.8.1", UpdateType.PATCH)
        assert str(update) == "a/a ~7.8.0 → ~7.8.1"
