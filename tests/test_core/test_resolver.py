"""Unit tests for composer_check_updates.core.resolver.

Test Coverage:
- Dev branch and prerelease detection
- Highest stable selection and its fallback
- Candidate selection under latest, minor and patch targets
"""

from __future__ import annotations

from typing import List

import pytest

from composer_check_updates.core.catalog import CatalogVersion
from composer_check_updates.core.resolver import (
    is_dev_version,
    is_stable,
    is_unstable_version,
    select_for_target,
    select_stable,
)
from composer_check_updates.models import TargetPolicy


def rows(*versions: str) -> List[CatalogVersion]:
    """Build catalog rows, deriving version_normalized like Packagist does."""
    return [
        CatalogVersion(v, v if v.startswith("dev-") else v.lstrip("v") + ".0") for v in versions
    ]


@pytest.mark.unit
class TestStability:
    """Tests for the dev/unstable predicates."""

    def test_dev_branch(self) -> None:
        assert is_dev_version(CatalogVersion("dev-main", "dev-main"))

    def test_branch_alias(self) -> None:
        assert is_dev_version(CatalogVersion("2.x-dev", "2.9999999.9999999.9999999-dev"))

    def test_release_is_not_dev(self) -> None:
        assert not is_dev_version(CatalogVersion("1.0.0", "1.0.0.0"))

    @pytest.mark.parametrize(
        "version",
        [
            "1.0.0-alpha",
            "1.1.0-beta1",
            "2.0.0RC2",
            "2.0.0-rc.1",
            "1.0a1",
            "2.0.0b",
            "1.1.0-b1",
            "1.1.0-a2",
            "v2.0.0-b",
            "2.0.0.b3",
        ],
    )
    def test_unstable(self, version: str) -> None:
        assert is_unstable_version(version)

    @pytest.mark.parametrize("version", ["1.0.0", "v2.3.4", "10.0", "1.0.0-patch1", "1.0.0-bugfix"])
    def test_stable(self, version: str) -> None:
        assert not is_unstable_version(version)

    def test_is_stable_combines_both(self) -> None:
        assert is_stable(CatalogVersion("1.0.0", "1.0.0.0"))
        assert not is_stable(CatalogVersion("1.0.0-beta", "1.0.0.0-beta"))
        assert not is_stable(CatalogVersion("dev-main", "dev-main"))


@pytest.mark.unit
class TestSelectStable:
    """Tests for select_stable."""

    def test_highest_stable(self) -> None:
        catalog = rows("dev-main", "2.0.0-beta1", "1.10.0", "1.9.0", "v1.2.0")
        assert select_stable(catalog) == "1.10.0"

    def test_short_prerelease_tag_skipped(self) -> None:
        assert select_stable(rows("1.1.0-b1", "1.0.0")) == "1.0.0"

    def test_strips_v_prefix(self) -> None:
        assert select_stable(rows("v3.1.0", "v3.0.0")) == "3.1.0"

    def test_falls_back_to_first_non_dev_entry(self) -> None:
        """Test a prerelease-only catalog yields its first non-dev row."""
        catalog = rows("dev-main", "2.0.0-beta2", "2.0.0-beta1")
        assert select_stable(catalog) == "2.0.0-beta2"

    def test_only_dev_branches(self) -> None:
        assert select_stable(rows("dev-main", "dev-feature")) is None

    def test_empty(self) -> None:
        assert select_stable([]) is None

    def test_order_independent(self) -> None:
        assert select_stable(rows("1.0.0", "3.0.0", "2.0.0")) == "3.0.0"


@pytest.mark.unit
class TestSelectForTarget:
    """Tests for select_for_target and the target policies."""

    CATALOG = rows("2.1.0", "2.0.0", "1.5.0", "1.4.2", "1.4.1", "1.4.0", "2.2.0-rc1", "dev-main")

    def test_latest(self) -> None:
        assert select_for_target(self.CATALOG, "1.4.0") == "2.1.0"
        assert select_for_target(self.CATALOG, "1.4.0", TargetPolicy.LATEST) == "2.1.0"

    def test_minor_stays_on_major(self) -> None:
        assert select_for_target(self.CATALOG, "1.4.0", TargetPolicy.MINOR) == "1.5.0"

    def test_patch_stays_on_minor(self) -> None:
        assert select_for_target(self.CATALOG, "1.4.0", TargetPolicy.PATCH) == "1.4.2"

    def test_accepts_strings(self) -> None:
        assert select_for_target(self.CATALOG, "1.4.0", "MINOR") == "1.5.0"

    def test_unknown_target_means_latest(self) -> None:
        assert select_for_target(self.CATALOG, "1.4.0", "newest") == "2.1.0"

    def test_no_candidate_in_range(self) -> None:
        """Test the minor target never falls back to another major."""
        assert select_for_target(rows("2.0.0", "1.0.0"), "3.0.0", TargetPolicy.MINOR) is None

    def test_may_return_older_version(self) -> None:
        # Filtering against the current version happens in the checker
        assert select_for_target(rows("1.2.0", "1.1.0"), "1.3.0", TargetPolicy.PATCH) is None
        assert select_for_target(rows("1.2.0", "1.1.0"), "1.5.0", TargetPolicy.MINOR) == "1.2.0"

    def test_prereleases_never_candidates(self) -> None:
        catalog = rows("3.0.0-beta1", "2.0.0")
        assert select_for_target(catalog, "2.0.0", TargetPolicy.LATEST) == "2.0.0"

    def test_unparseable_current_uses_select_stable(self) -> None:
        catalog = rows("dev-main", "2.0.0-beta1")
        assert select_for_target(catalog, "dev-main", TargetPolicy.PATCH) == "2.0.0-beta1"

    def test_v_prefixed_current(self) -> None:
        assert select_for_target(self.CATALOG, "v1.4.0", TargetPolicy.PATCH) == "1.4.2"
