from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class AssetGroup(str, Enum):
    scripts = "scripts"
    dependencies = "dependencies"
    devDependencies = "devDependencies"

    @classmethod
    def try_from(cls, value: Any) -> "AssetGroup | None":
        try:
            return cls(value)
        except ValueError:
            return None


def _empty_groups() -> dict[AssetGroup, dict[str, Any]]:
    return {group: {} for group in AssetGroup}


@dataclass(frozen=True)
class AssetDeclaration:
    groups: dict[AssetGroup, dict[str, Any]] = field(default_factory=_empty_groups)

    def get(self, group: AssetGroup) -> dict[str, Any]:
        return self.groups.get(group, {})

    def is_empty(self) -> bool:
        return not any(self.groups.values())


@dataclass(frozen=True)
class InstalledPackage:
    name: str
    assets: AssetDeclaration
    extra: dict[str, Any] = field(default_factory=dict)


def parse_extra(extra: Mapping[str, Any] | None) -> AssetDeclaration:
    """
    Build an AssetDeclaration from a package's `extra` metadata.

    Supported layouts of `extra.npm`:
      {"dependencies": {...}, "devDependencies": {...}, "scripts": {...}}
      {"some-lib": "1.2.3"}   (legacy: bare names are runtime dependencies)
    """
    groups = _empty_groups()
    if not isinstance(extra, Mapping):
        return AssetDeclaration(groups=groups)

    npm = extra.get("npm")
    if not isinstance(npm, Mapping):
        return AssetDeclaration(groups=groups)

    for group in AssetGroup:
        section = npm.get(group.value)
        if isinstance(section, Mapping):
            groups[group] = {str(k): v for k, v in section.items()}

    # Legacy npm extra
    for key, value in npm.items():
        if AssetGroup.try_from(key) is None:
            groups[AssetGroup.dependencies][str(key)] = value

    return AssetDeclaration(groups=groups)
