"""TOML configuration loader.

Settings files live in one directory and are layered in order:
``default.toml`` then ``{PUSHBOT_ENV}.toml``. Both are optional.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "PUSHBOT_CONFIG_DIR"
ENVIRONMENT_ENV = "PUSHBOT_ENV"
DEFAULT_ENVIRONMENT = "development"


def get_config_dir() -> Path:
    """Locate the configuration directory.

    PUSHBOT_CONFIG_DIR wins when set and must exist. Otherwise the nearest
    ``config/`` in the working directory or up to four parents is used.

    Raises:
        FileNotFoundError: If PUSHBOT_CONFIG_DIR points nowhere
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents][:5]:
        candidate = parent / "config"
        if candidate.is_dir():
            return candidate
    return Path("config")


def get_environment() -> str:
    """Name of the active environment (PUSHBOT_ENV, default 'development')."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def config_files(config_dir: Path, environment: str) -> list[Path]:
    """Existing settings files in the order they are applied."""
    candidates = [config_dir / "default.toml", config_dir / f"{environment}.toml"]
    return [path for path in dict.fromkeys(candidates) if path.is_file()]


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested tables merge key by key."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Load and merge the settings files.

    Args:
        config_dir: Directory to read (located with get_config_dir() if omitted)
        environment: Environment name (get_environment() if omitted)

    Raises:
        tomllib.TOMLDecodeError: If a file is not valid TOML
    """
    directory = config_dir if config_dir is not None else get_config_dir()
    env = environment if environment is not None else get_environment()

    config: dict[str, Any] = {}
    for path in config_files(directory, env):
        with path.open("rb") as f:
            config = deep_merge(config, tomllib.load(f))
    return config
