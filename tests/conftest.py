"""Shared fixtures: a sample Composer project and a fake Packagist."""

from __future__ import annotations

import json
import functools
from pathlib import Path
from typing import Dict, Generator, List

import httpx
import pytest

from composer_check_updates.utils.http import HTTPClient
from composer_check_updates.utils.console import reconfigure_console


#: Published versions served by the fake repository, newest first.
CATALOGS: Dict[str, List[str]] = {
    "symfony/console": ["v7.0.0", "v6.4.1", "v5.4.21", "v5.4.0"],
    "guzzlehttp/guzzle": ["7.8.1", "7.8.0", "7.7.0"],
    "monolog/monolog": ["3.5.0", "2.9.2", "2.9.1"],
    "phpunit/phpunit": ["11.0.0-beta1", "10.5.0", "9.6.13"],
}


@pytest.fixture(autouse=True)
def plain_console() -> Generator[None, None, None]:
    """Start and finish every test with a fresh, colorless console."""
    reconfigure_console(color=False)
    yield
    reconfigure_console()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A Composer project with a manifest and a lock file.

    Returns:
        Path: The project directory.
    """
    manifest = {
        "name": "acme/app",
        "require": {
            "php": ">=8.1",
            "ext-json": "*",
            "symfony/console": "^5.4",
            "guzzlehttp/guzzle": "~7.8.0",
            "monolog/monolog": "^2.9",
        },
        "require-dev": {"phpunit/phpunit": "^9.6"},
    }
    lock = {
        "packages": [
            {"name": "symfony/console", "version": "v5.4.21"},
            {"name": "guzzlehttp/guzzle", "version": "7.8.0"},
            {"name": "monolog/monolog", "version": "2.9.2"},
        ],
        "packages-dev": [{"name": "phpunit/phpunit", "version": "9.6.13"}],
    }
    (tmp_path / "composer.json").write_text(json.dumps(manifest, indent=4) + "\n", encoding="utf-8")
    (tmp_path / "composer.lock").write_text(json.dumps(lock, indent=4), encoding="utf-8")
    return tmp_path


@pytest.fixture
def packagist(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    """Serve CATALOGS through a mock transport for the commands.

    Returns:
        List[str]: Package names requested, in request order.
    """
    requested: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.path[len("/p2/") : -len(".json")]
        requested.append(name)
        if name not in CATALOGS:
            return httpx.Response(404)
        rows = [
            {"version": v, "version_normalized": v.lstrip("v") + ".0"} for v in CATALOGS[name]
        ]
        return httpx.Response(200, json={"packages": {name: rows}})

    monkeypatch.setattr(
        "composer_check_updates.commands.common.HTTPClient",
        functools.partial(HTTPClient, transport=httpx.MockTransport(handler)),
    )
    return requested
