"""Unit tests for composer_check_updates.core.manifest.

Test Coverage:
- Loading composer.json and error reporting
- Reading installed versions from composer.lock
- Wildcard filters, rejects and platform package exclusion
- Dependency collection order and dev/prod precedence
- Writing rewritten constraints back, formatting and backups
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from composer_check_updates.core.manifest import (
    ComposerManifest,
    apply_updates,
    collect_dependencies,
    is_platform_package,
    load_lock_versions,
    matches_pattern,
    render_manifest,
    should_include,
)
from composer_check_updates.exceptions import ManifestError
from composer_check_updates.models import Dependency, PackageUpdate, UpdateType


def write_json(path: Path, data: Any, newline: bool = True) -> Path:
    content = json.dumps(data, indent=4)
    path.write_text(content + ("\n" if newline else ""), encoding="utf-8")
    return path


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    """A composer.json with production, dev and platform requirements."""
    return write_json(
        tmp_path / "composer.json",
        {
            "name": "acme/app",
            "require": {
                "php": ">=8.1",
                "ext-json": "*",
                "symfony/console": "^5.4",
                "monolog/monolog": "^2.9",
            },
            "require-dev": {
                "phpunit/phpunit": "^9.6",
                "symfony/var-dumper": "^5.4",
            },
            "extra": {"branch-alias": {"dev-main": "1.x-dev"}},
        },
    )


def _update(name: str, constraint: str, latest: str, is_dev: bool = False) -> PackageUpdate:
    return PackageUpdate(
        name=name,
        current_constraint=constraint,
        current_version=constraint.lstrip("^~"),
        latest_version=latest,
        update_type=UpdateType.MAJOR,
        is_dev=is_dev,
    )


@pytest.mark.unit
class TestComposerManifestLoad:
    """Tests for ComposerManifest.load."""

    def test_load(self, manifest_path: Path) -> None:
        manifest = ComposerManifest.load(manifest_path)

        assert manifest.path == manifest_path
        assert manifest.require["symfony/console"] == "^5.4"
        assert list(manifest.require_dev) == ["phpunit/phpunit", "symfony/var-dumper"]
        assert "branch-alias" in manifest.extra

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="not found"):
            ComposerManifest.load(tmp_path / "composer.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "composer.json"
        path.write_text("{ not json", encoding="utf-8")

        with pytest.raises(ManifestError, match="Invalid JSON"):
            ComposerManifest.load(path)

    def test_non_object(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "composer.json", ["a", "b"])

        with pytest.raises(ManifestError, match="JSON object"):
            ComposerManifest.load(path)

    def test_missing_sections_are_empty(self, tmp_path: Path) -> None:
        manifest = ComposerManifest.load(write_json(tmp_path / "composer.json", {"name": "x/y"}))

        assert manifest.require == {}
        assert manifest.require_dev == {}
        assert manifest.extra == {}

    def test_non_string_constraints_ignored(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "composer.json", {"require": {"a/a": "^1.0", "b/b": 2}})
        assert ComposerManifest.load(path).require == {"a/a": "^1.0"}


@pytest.mark.unit
class TestLoadLockVersions:
    """Tests for load_lock_versions."""

    def test_reads_both_sections(self, tmp_path: Path) -> None:
        path = write_json(
            tmp_path / "composer.lock",
            {
                "packages": [{"name": "symfony/console", "version": "v5.4.21"}],
                "packages-dev": [{"name": "phpunit/phpunit", "version": "9.6.13"}],
            },
        )

        assert load_lock_versions(path) == {
            "symfony/console": "5.4.21",
            "phpunit/phpunit": "9.6.13",
        }

    def test_first_occurrence_wins(self, tmp_path: Path) -> None:
        path = write_json(
            tmp_path / "composer.lock",
            {
                "packages": [{"name": "a/a", "version": "1.0.0"}],
                "packages-dev": [{"name": "a/a", "version": "2.0.0"}],
            },
        )
        assert load_lock_versions(path) == {"a/a": "1.0.0"}

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_lock_versions(tmp_path / "composer.lock") == {}

    def test_malformed_file(self, tmp_path: Path) -> None:
        path = tmp_path / "composer.lock"
        path.write_text("garbage", encoding="utf-8")
        assert load_lock_versions(path) == {}

    def test_bad_entries_skipped(self, tmp_path: Path) -> None:
        path = write_json(
            tmp_path / "composer.lock",
            {"packages": ["junk", {"name": "a/a"}, {"name": "b/b", "version": "1.0.0"}]},
        )
        assert load_lock_versions(path) == {"b/b": "1.0.0"}


@pytest.mark.unit
class TestPatterns:
    """Tests for matches_pattern, is_platform_package and should_include."""

    @pytest.mark.parametrize(
        "name, pattern, expected",
        [
            ("symfony/console", "symfony/*", True),
            ("Symfony/Console", "symfony/*", True),
            ("symfony/console", "*/console", True),
            ("symfony/console", "symfony/console", True),
            ("symfony/console-extra", "symfony/console", False),
            ("monolog/monolog", "symfony/*", False),
            ("a.b/c", "a.b/*", True),
            ("axb/c", "a.b/*", False),
        ],
    )
    def test_matches_pattern(self, name: str, pattern: str, expected: bool) -> None:
        assert matches_pattern(name, pattern) is expected

    @pytest.mark.parametrize("name", ["php", "ext-json", "ext-mbstring", "lib-pcre", "composer"])
    def test_platform_packages(self, name: str) -> None:
        assert is_platform_package(name)

    def test_vendor_package_is_not_platform(self) -> None:
        assert not is_platform_package("symfony/console")

    def test_should_include(self) -> None:
        assert should_include("symfony/console")
        assert not should_include("php")
        assert should_include("symfony/console", filters=["symfony/*"])
        assert not should_include("monolog/monolog", filters=["symfony/*"])
        assert not should_include("symfony/console", rejects=["symfony/*"])

    def test_reject_beats_filter(self) -> None:
        assert not should_include("symfony/console", filters=["symfony/*"], rejects=["*/console"])


@pytest.mark.unit
class TestCollectDependencies:
    """Tests for collect_dependencies."""

    def test_dev_first_then_prod(self, manifest_path: Path) -> None:
        """Test ordering and platform package exclusion.

        Development dependencies come first; php and ext-json never appear.
        """
        deps = collect_dependencies(ComposerManifest.load(manifest_path))

        assert [d.name for d in deps] == [
            "phpunit/phpunit",
            "symfony/var-dumper",
            "symfony/console",
            "monolog/monolog",
        ]
        assert [d.is_dev for d in deps] == [True, True, False, False]

    def test_lock_versions_attached(self, manifest_path: Path) -> None:
        deps = collect_dependencies(
            ComposerManifest.load(manifest_path),
            {"symfony/console": "5.4.21"},
        )
        by_name = {d.name: d for d in deps}

        assert by_name["symfony/console"].installed_version == "5.4.21"
        assert by_name["monolog/monolog"].installed_version is None

    def test_prod_overrides_dev_in_place(self, tmp_path: Path) -> None:
        path = write_json(
            tmp_path / "composer.json",
            {
                "require": {"b/b": "^1.0", "a/a": "^2.0"},
                "require-dev": {"a/a": "^1.0", "c/c": "^1.0"},
            },
        )
        deps = collect_dependencies(ComposerManifest.load(path))

        assert deps == [
            Dependency("a/a", "^2.0", is_dev=False),
            Dependency("c/c", "^1.0", is_dev=True),
            Dependency("b/b", "^1.0", is_dev=False),
        ]

    def test_dev_only(self, manifest_path: Path) -> None:
        deps = collect_dependencies(ComposerManifest.load(manifest_path), dev_only=True)
        assert all(d.is_dev for d in deps)
        assert len(deps) == 2

    def test_prod_only(self, manifest_path: Path) -> None:
        deps = collect_dependencies(ComposerManifest.load(manifest_path), prod_only=True)
        assert [d.name for d in deps] == ["symfony/console", "monolog/monolog"]

    def test_filters_and_rejects(self, manifest_path: Path) -> None:
        deps = collect_dependencies(
            ComposerManifest.load(manifest_path),
            filters=["symfony/*"],
            rejects=["*/var-dumper"],
        )
        assert [d.name for d in deps] == ["symfony/console"]


@pytest.mark.unit
class TestApplyUpdates:
    """Tests for render_manifest and apply_updates."""

    def test_render_manifest_style(self) -> None:
        data: Dict[str, Any] = {"name": "acme/app", "homepage": "https://ex.org/ü"}
        rendered = render_manifest(data)

        assert rendered.endswith("}\n")
        assert '    "name": "acme/app"' in rendered
        assert "https://ex.org/ü" in rendered

    def test_render_without_newline(self) -> None:
        assert not render_manifest({}, trailing_newline=False).endswith("\n")

    def test_rewrites_only_constraints(self, manifest_path: Path) -> None:
        """Test only the updated constraints change.

        Key order, other sections and unrelated entries are preserved.
        """
        before = json.loads(manifest_path.read_text(encoding="utf-8"))

        apply_updates(
            manifest_path,
            [
                _update("symfony/console", "^5.4", "7.0.0"),
                _update("phpunit/phpunit", "^9.6", "10.5.0", is_dev=True),
            ],
        )
        after = json.loads(manifest_path.read_text(encoding="utf-8"))

        assert after["require"]["symfony/console"] == "^7.0"
        assert after["require-dev"]["phpunit/phpunit"] == "^10.5"
        assert after["require"]["monolog/monolog"] == "^2.9"
        assert list(after) == list(before)
        assert list(after["require"]) == list(before["require"])
        assert after["extra"] == before["extra"]

    def test_keeps_trailing_newline_state(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "composer.json", {"require": {"a/a": "^1.0"}}, newline=False)

        apply_updates(path, [_update("a/a", "^1.0", "2.0.0")])

        assert not path.read_text(encoding="utf-8").endswith("\n")

    def test_writes_trailing_newline_when_present(self, manifest_path: Path) -> None:
        apply_updates(manifest_path, [_update("symfony/console", "^5.4", "7.0.0")])
        assert manifest_path.read_text(encoding="utf-8").endswith("}\n")

    def test_undeclared_package_ignored(self, manifest_path: Path) -> None:
        apply_updates(manifest_path, [_update("symfony/console", "^5.4", "7.0.0", is_dev=True)])

        after = json.loads(manifest_path.read_text(encoding="utf-8"))
        assert after["require"]["symfony/console"] == "^5.4"
        assert "symfony/console" not in after["require-dev"]

    def test_backup(self, manifest_path: Path) -> None:
        original = manifest_path.read_text(encoding="utf-8")

        backup_path = apply_updates(
            manifest_path,
            [_update("symfony/console", "^5.4", "7.0.0")],
            backup=True,
        )

        assert backup_path is not None
        assert backup_path.read_text(encoding="utf-8") == original
        assert backup_path.name.startswith("composer.")
        assert backup_path.name.endswith(".backup.json")

    def test_no_backup_by_default(self, manifest_path: Path) -> None:
        assert apply_updates(manifest_path, []) is None

    def test_missing_manifest(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError):
            apply_updates(tmp_path / "composer.json", [])
