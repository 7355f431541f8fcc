from __future__ import annotations

import shutil
from pathlib import Path

from .errors import AssetPluginError
from .packages import ProjectContext


def copy_dir(src: Path, dst: Path, force: bool = False) -> None:
    """Recursively copy `src` into `dst`. Existing files are only replaced when `force` is set."""
    dst.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        target = dst / entry.name
        if entry.is_dir():
            copy_dir(entry, target, force)
        elif force or not target.exists():
            shutil.copy(entry, target)


def publish_assets(ctx: ProjectContext) -> Path:
    source = ctx.publish_source
    if not source.is_dir():
        raise AssetPluginError(
            f"Asset source directory not found: {source}. Check that byteshard/ui is installed and the vendor-dir setting."
        )

    destination = ctx.publish_destination
    destination.mkdir(parents=True, exist_ok=True)
    copy_dir(source, destination, force=True)
    return destination
