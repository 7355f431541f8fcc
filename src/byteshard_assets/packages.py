from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from .assets import AssetDeclaration, InstalledPackage, parse_extra
from .errors import ManifestParseError
from .manifest import LOCK_FILENAME, MANIFEST_FILENAME, MODULES_DIRNAME

COMPOSER_FILENAME = "composer.json"
INSTALLED_FILENAME = "installed.json"
DEFAULT_VENDOR_DIR = "vendor"
DEFAULT_PUBLIC_PATH = "public"
PUBLISH_SOURCE = Path("byteshard") / "ui" / "src" / "public"


class PackageRepository(Protocol):
    def canonical_packages(self) -> list[InstalledPackage]:
        ...


@dataclass(frozen=True)
class ProjectContext:
    root_dir: Path
    vendor_dir: Path
    root_extra: dict[str, Any] = field(default_factory=dict)

    @property
    def root_assets(self) -> AssetDeclaration:
        return parse_extra(self.root_extra)

    @property
    def manifest_path(self) -> Path:
        return self.root_dir / MANIFEST_FILENAME

    @property
    def lock_path(self) -> Path:
        return self.root_dir / LOCK_FILENAME

    @property
    def modules_dir(self) -> Path:
        return self.root_dir / MODULES_DIRNAME

    @property
    def public_path(self) -> str:
        value = self.root_extra.get("public-path")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_PUBLIC_PATH

    @property
    def publish_source(self) -> Path:
        return self.vendor_dir / PUBLISH_SOURCE

    @property
    def publish_destination(self) -> Path:
        return self.vendor_dir.parent / self.public_path


def _read_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ManifestParseError(f'Can not parse "{path}", make sure it has valid JSON structure') from e
    except OSError as e:
        raise ManifestParseError(f'Can not read "{path}", make sure the user has permission to read it') from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(f'Can not parse "{path}", make sure it has valid JSON structure') from e


def load_project(root_dir: Path) -> ProjectContext:
    root_dir = root_dir.expanduser().resolve()
    composer_json = root_dir / COMPOSER_FILENAME
    if not composer_json.is_file():
        raise ManifestParseError(f"Missing {COMPOSER_FILENAME} in project directory: {root_dir}")

    raw = _read_json(composer_json)
    if not isinstance(raw, dict):
        raise ManifestParseError(f'Can not parse "{composer_json}", expected a JSON object at the top level')

    extra = raw.get("extra")
    if not isinstance(extra, dict):
        extra = {}

    vendor = os.getenv("COMPOSER_VENDOR_DIR")
    if not vendor:
        config = raw.get("config")
        if isinstance(config, dict) and isinstance(config.get("vendor-dir"), str):
            vendor = config["vendor-dir"].strip()
    vendor_dir = root_dir / (vendor or DEFAULT_VENDOR_DIR)

    return ProjectContext(root_dir=root_dir, vendor_dir=vendor_dir.resolve(), root_extra=extra)


class InstalledPackagesRepository:
    """Reads `<vendor-dir>/composer/installed.json` as written by Composer 1 and 2."""

    def __init__(self, vendor_dir: Path) -> None:
        self.path = vendor_dir / "composer" / INSTALLED_FILENAME

    def _items(self) -> list[Any]:
        if not self.path.exists():
            return []
        raw = _read_json(self.path)
        if isinstance(raw, list):
            return raw
        if isinstance(raw, dict) and isinstance(raw.get("packages"), list):
            return raw["packages"]
        return []

    def canonical_packages(self) -> list[InstalledPackage]:
        packages: list[InstalledPackage] = []
        seen: set[str] = set()
        for item in self._items():
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            if not isinstance(name, str) or not name.strip():
                continue
            name = name.strip()
            if name in seen:
                continue
            seen.add(name)
            extra = item.get("extra")
            if not isinstance(extra, dict):
                extra = {}
            packages.append(InstalledPackage(name=name, assets=parse_extra(extra), extra=extra))
        return packages
