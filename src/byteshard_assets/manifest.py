from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from .assets import AssetDeclaration, AssetGroup, InstalledPackage
from .errors import AssetConflictError, ManifestParseError

MANIFEST_FILENAME = "package.json"
LOCK_FILENAME = "package-lock.json"
MODULES_DIRNAME = "node_modules"
MANIFEST_DESCRIPTION = "Assets for byteShard"

MergedManifest = dict[AssetGroup, dict[str, Any]]


@dataclass(frozen=True)
class ReconcileResult:
    manifest: dict[str, Any]
    changed: bool
    notifications: tuple[str, ...]


def collect_assets(packages: Iterable[InstalledPackage], root: AssetDeclaration) -> MergedManifest:
    """
    Merge the declarations of all installed packages, then overlay the root's.

    Groups come out sorted by name (case-insensitive); entries keep declaration order.
    """
    packages = list(packages)
    merged: MergedManifest = {}

    for group in sorted(AssetGroup, key=lambda g: g.value.lower()):
        root_resource = root.get(group)
        acc: dict[str, Any] = {}
        for package in packages:
            resource = package.assets.get(group)
            conflicting = [
                name
                for name, value in resource.items()
                if name in acc and acc[name] != value and name not in root_resource
            ]
            if conflicting:
                raise AssetConflictError(group.value, conflicting)
            acc.update(resource)

        acc.update(root_resource)
        merged[group] = acc

    return merged


def _diff_group(
    current: dict[str, Any],
    future: dict[str, Any],
    group: AssetGroup,
    notifications: list[str],
) -> bool:
    changed = False
    for name, new_version in future.items():
        if name in current:
            version = current[name]
            if new_version != version:
                changed = True
                notifications.append(
                    f"update field {name} from version {version} to {new_version} at {group.value} in {MANIFEST_FILENAME}"
                )
        else:
            changed = True
            notifications.append(f"add field {name} with version {new_version} to {group.value} in {MANIFEST_FILENAME}")
    return changed


def fresh_manifest(merged: MergedManifest) -> dict[str, Any]:
    return {
        "description": MANIFEST_DESCRIPTION,
        "scripts": dict(merged.get(AssetGroup.scripts, {})),
        "dependencies": dict(merged.get(AssetGroup.dependencies, {})),
        "devDependencies": dict(merged.get(AssetGroup.devDependencies, {})),
        "private": True,
    }


def reconcile_manifest(
    merged: MergedManifest,
    existing: dict[str, Any] | None,
    *,
    modules_installed: bool,
) -> ReconcileResult:
    """
    Compare the merged declarations against the manifest on disk.

    Changed groups are rewritten as the existing mapping overlaid with the merged one, so
    keys that only exist on disk survive. A missing modules directory forces a reinstall.
    """
    if existing is None:
        return ReconcileResult(manifest=fresh_manifest(merged), changed=True, notifications=())

    manifest = copy.deepcopy(existing)
    notifications: list[str] = []
    changed = False

    for group in AssetGroup:
        future = merged.get(group, {})
        current = existing.get(group.value)
        if not isinstance(current, dict):
            current = {}
        group_changed = _diff_group(current, future, group, notifications)
        if group_changed or not modules_installed:
            changed = True
            manifest[group.value] = {**current, **future}

    return ReconcileResult(manifest=manifest, changed=changed, notifications=tuple(notifications))


def load_manifest(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ManifestParseError(
            f'Can not parse "{path.name}" file, make sure it has valid JSON structure'
        ) from e
    except OSError as e:
        raise ManifestParseError(
            f'Can not read "{path.name}" file, make sure the user has permission to read it'
        ) from e
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(
            f'Can not parse "{path.name}" file, make sure it has valid JSON structure'
        ) from e
    if not isinstance(raw, dict):
        raise ManifestParseError(f'Can not parse "{path.name}" file, expected a JSON object at the top level')
    return raw


def dump_manifest(manifest: dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"


def write_manifest(path: Path, manifest: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(dump_manifest(manifest), encoding="utf-8")
    tmp.replace(path)
