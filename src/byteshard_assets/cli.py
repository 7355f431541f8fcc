from __future__ import annotations

import argparse
import json
import sys
import textwrap
from dataclasses import asdict
from pathlib import Path

from ._version import __version__
from .config import Config, config_path, load_config, merge_overrides, save_config
from .console import ConsoleIO
from .errors import AssetPluginError
from .hook import SUBSCRIBED_EVENTS, dispatch, update_assets
from .manifest import collect_assets
from .packages import InstalledPackagesRepository, load_project
from .publisher import publish_assets


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="byteshard-assets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Merge npm assets declared by Composer packages into package.json and publish UI assets.",
        epilog=textwrap.dedent(
            """\
            Composer integration (composer.json):
              "scripts": {
                "post-install-cmd": "byteshard-assets hook post-install-cmd",
                "post-update-cmd": "byteshard-assets hook post-update-cmd"
              }

            Environment variables:
              BYTESHARD_ASSETS_CONFIG_PATH, BYTESHARD_ASSETS_PACKAGE_MANAGER, BYTESHARD_ASSETS_TIMEOUT_S,
              COMPOSER_VENDOR_DIR
            """
        ),
    )
    p.add_argument("--version", action="version", version=f"byteshard-assets {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", default=None, help="Verbose package manager output")
    p.add_argument("--project-dir", default=".", help="Project root containing composer.json (default: .)")
    p.add_argument("--package-manager", help="Package manager executable (default: npm)")
    p.add_argument("--timeout-s", type=float, help="Package manager timeout in seconds (default: 60)")

    sub = p.add_subparsers(dest="cmd", required=True)

    hook = sub.add_parser("hook", help="Run the routine bound to a Composer event")
    hook.add_argument("event", choices=sorted(SUBSCRIBED_EVENTS), help="Composer event name")

    sub.add_parser("install", help="Merge npm assets into package.json and install them")
    sub.add_parser("publish", help="Copy byteshard/ui public assets into the public path")

    collect = sub.add_parser("collect", help="Show merged npm assets without writing anything")
    collect.add_argument("--json", action="store_true", help="Output JSON")

    cfg = sub.add_parser("config", help="Manage local config")
    cfg_sub = cfg.add_subparsers(dest="subcmd", required=True)
    cfg_sub.add_parser("path", help="Print config path")
    cfg_sub.add_parser("show", help="Show config")
    cfg_set = cfg_sub.add_parser("set", help="Set config fields")
    cfg_set.add_argument("--package-manager", dest="set_package_manager")
    cfg_set.add_argument("--timeout-s", dest="set_timeout_s", type=float)
    cfg_set.add_argument("--verbose", dest="set_verbose", choices=["true", "false"])

    return p


def _effective_config(args: argparse.Namespace) -> Config:
    return merge_overrides(
        load_config(),
        package_manager=args.package_manager,
        timeout_s=args.timeout_s,
        verbose=args.verbose,
    )


def cmd_config(args: argparse.Namespace) -> int:
    if args.subcmd == "path":
        print(str(config_path()))
        return 0

    if args.subcmd == "show":
        cfg = load_config()
        print(json.dumps(asdict(cfg), indent=2, sort_keys=True))
        return 0

    if args.subcmd == "set":
        cur = load_config()
        new = Config(
            package_manager=args.set_package_manager if args.set_package_manager is not None else cur.package_manager,
            timeout_s=args.set_timeout_s if args.set_timeout_s is not None else cur.timeout_s,
            verbose=(args.set_verbose == "true") if args.set_verbose is not None else cur.verbose,
        )
        path = save_config(new)
        print(f"Saved: {path}")
        return 0

    raise AssertionError("unreachable")


def cmd_hook(args: argparse.Namespace) -> int:
    cfg = _effective_config(args)
    ctx = load_project(Path(args.project_dir))
    console = ConsoleIO(verbose=cfg.verbose)
    dispatch(args.event, ctx, console, cfg)
    return 0


def cmd_install(args: argparse.Namespace) -> int:
    cfg = _effective_config(args)
    ctx = load_project(Path(args.project_dir))
    console = ConsoleIO(verbose=cfg.verbose)
    result = update_assets(ctx, console, cfg)
    if not result.changed:
        print(f"{ctx.manifest_path.name} is up to date")
    return 0


def cmd_publish(args: argparse.Namespace) -> int:
    ctx = load_project(Path(args.project_dir))
    destination = publish_assets(ctx)
    print(f"published: {destination}")
    return 0


def cmd_collect(args: argparse.Namespace) -> int:
    ctx = load_project(Path(args.project_dir))
    repo = InstalledPackagesRepository(ctx.vendor_dir)
    merged = collect_assets(repo.canonical_packages(), ctx.root_assets)

    if args.json:
        print(json.dumps({g.value: entries for g, entries in merged.items()}, indent=2))
        return 0

    for group, entries in merged.items():
        print(f"{group.value}:")
        for name, value in entries.items():
            print(f"  {name}: {value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.cmd == "config":
            return cmd_config(args)
        if args.cmd == "hook":
            return cmd_hook(args)
        if args.cmd == "install":
            return cmd_install(args)
        if args.cmd == "publish":
            return cmd_publish(args)
        if args.cmd == "collect":
            return cmd_collect(args)
        raise AssertionError("unreachable")
    except AssetPluginError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
