from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_path

DEFAULT_PACKAGE_MANAGER = "npm"
DEFAULT_TIMEOUT_S = 60.0


@dataclass(frozen=True)
class Config:
    package_manager: str = DEFAULT_PACKAGE_MANAGER
    timeout_s: float = DEFAULT_TIMEOUT_S
    verbose: bool = False


def config_path(path_override: str | Path | None = None) -> Path:
    if path_override is not None:
        return Path(path_override).expanduser()
    if env := os.getenv("BYTESHARD_ASSETS_CONFIG_PATH"):
        return Path(env).expanduser()
    return user_config_path("byteshard-assets") / "config.json"


def load_config(path_override: str | Path | None = None) -> Config:
    path = config_path(path_override)
    if not path.exists():
        return Config()

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        return Config()

    allowed = {f.name for f in Config.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    filtered: dict[str, Any] = {k: v for k, v in raw.items() if k in allowed}
    return Config(**filtered)  # type: ignore[arg-type]


def save_config(cfg: Config, path_override: str | Path | None = None) -> Path:
    path = config_path(path_override)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(path)
    return path


def merge_overrides(
    base: Config,
    *,
    package_manager: str | None = None,
    timeout_s: float | None = None,
    verbose: bool | None = None,
) -> Config:
    # Env overrides config; explicit arguments override both.
    pm = package_manager
    if pm is None:
        pm = os.getenv("BYTESHARD_ASSETS_PACKAGE_MANAGER") or base.package_manager
    timeout: Any = timeout_s
    if timeout is None:
        timeout = os.getenv("BYTESHARD_ASSETS_TIMEOUT_S") or base.timeout_s
    try:
        timeout_f = float(timeout)
    except (TypeError, ValueError):
        timeout_f = base.timeout_s
    return Config(
        package_manager=pm,
        timeout_s=timeout_f,
        verbose=base.verbose if verbose is None else verbose,
    )
