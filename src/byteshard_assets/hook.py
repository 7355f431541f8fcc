from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .config import Config
from .console import Console
from .errors import AssetPluginError
from .installer import install_assets
from .manifest import ReconcileResult, collect_assets, load_manifest, reconcile_manifest
from .packages import InstalledPackagesRepository, PackageRepository, ProjectContext
from .publisher import publish_assets


@dataclass(frozen=True)
class HookResult:
    reconcile: ReconcileResult
    published_to: Path


def update_assets(
    ctx: ProjectContext,
    console: Console,
    cfg: Config,
    *,
    repo: PackageRepository | None = None,
) -> ReconcileResult:
    repo = repo if repo is not None else InstalledPackagesRepository(ctx.vendor_dir)
    merged = collect_assets(repo.canonical_packages(), ctx.root_assets)
    result = reconcile_manifest(
        merged,
        load_manifest(ctx.manifest_path),
        modules_installed=ctx.modules_dir.is_dir(),
    )
    install_assets(
        result,
        console,
        manifest_path=ctx.manifest_path,
        lock_path=ctx.lock_path,
        package_manager=cfg.package_manager,
        timeout_s=cfg.timeout_s,
    )
    return result


def install_or_update(
    ctx: ProjectContext,
    console: Console,
    cfg: Config,
    *,
    repo: PackageRepository | None = None,
) -> HookResult:
    result = update_assets(ctx, console, cfg, repo=repo)
    published_to = publish_assets(ctx)
    return HookResult(reconcile=result, published_to=published_to)


SUBSCRIBED_EVENTS: dict[str, Callable[..., HookResult]] = {
    "post-install-cmd": install_or_update,
    "post-update-cmd": install_or_update,
}


def dispatch(
    event: str,
    ctx: ProjectContext,
    console: Console,
    cfg: Config,
    *,
    repo: PackageRepository | None = None,
) -> HookResult:
    handler = SUBSCRIBED_EVENTS.get(event)
    if handler is None:
        known = ", ".join(sorted(SUBSCRIBED_EVENTS))
        raise AssetPluginError(f"Unknown event {event!r}. Expected one of: {known}")
    return handler(ctx, console, cfg, repo=repo)
