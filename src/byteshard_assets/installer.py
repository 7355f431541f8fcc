from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from .config import DEFAULT_PACKAGE_MANAGER, DEFAULT_TIMEOUT_S
from .console import Console, warn
from .errors import PackageManagerError
from .manifest import LOCK_FILENAME, ReconcileResult, write_manifest


def install_command(package_manager: str, *, verbose: bool) -> list[str]:
    log_level = "info" if verbose else "error"
    return [package_manager, "install", "--no-audit", "--save-exact", "--no-optional", "--loglevel", log_level]


def drop_lock_file(lock_path: Path) -> None:
    lock_path.unlink(missing_ok=True)


def _forward_lines(text: str | bytes | None, write) -> None:
    if not text:
        return
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    for line in text.splitlines():
        write(line)


def run_package_manager(
    console: Console,
    *,
    cwd: Path,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> bool:
    """
    Run `<package_manager> install` in `cwd`.

    Returns False when the executable is not on PATH (a warning is written instead).
    Raises PackageManagerError on a non-zero exit status or when the timeout expires.
    """
    if shutil.which(package_manager) is None:
        warn(console, f'{package_manager} is not installed, please run "{package_manager} install" on your own')
        return False

    cmd = install_command(package_manager, verbose=console.verbose)
    console.write(" ".join(cmd))
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), capture_output=True, text=True, timeout=timeout_s)
    except subprocess.TimeoutExpired as e:
        if console.verbose:
            _forward_lines(e.stdout, console.write)
        _forward_lines(e.stderr, console.write_error)
        raise PackageManagerError(f"{package_manager} install timed out after {timeout_s:g}s") from e

    if console.verbose:
        _forward_lines(proc.stdout, console.write)
        _forward_lines(proc.stderr, console.write_error)
    if proc.returncode != 0:
        if not console.verbose:
            _forward_lines(proc.stderr, console.write_error)
        raise PackageManagerError(
            f"Failed to generate {LOCK_FILENAME} ({package_manager} install exited with status {proc.returncode})"
        )
    return True


def install_assets(
    result: ReconcileResult,
    console: Console,
    *,
    manifest_path: Path,
    lock_path: Path,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> bool:
    """Persist a changed manifest and run the package manager. Returns whether anything was written."""
    for line in result.notifications:
        console.write(line)
    if not result.changed:
        return False

    write_manifest(manifest_path, result.manifest)
    drop_lock_file(lock_path)
    run_package_manager(console, cwd=manifest_path.parent, package_manager=package_manager, timeout_s=timeout_s)
    return True
