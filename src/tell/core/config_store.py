import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w
from platformdirs import user_config_dir

from tell.core.errors import ConfigDirectoryError, ConfigParseError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "tell.toml"
DEFAULT_MODEL = "gemma2:2b"


@dataclass
class Config:
    """Persisted settings: the model used for generation."""

    model: str = DEFAULT_MODEL

    def to_dict(self) -> dict:
        return {"model": self.model}

    @classmethod
    def from_dict(cls, data: dict, path: Path) -> "Config":
        model = data.get("model")
        if model is None:
            raise ConfigParseError(path, "missing required field 'model'")
        if not isinstance(model, str) or not model:
            raise ConfigParseError(path, "'model' must be a non-empty string")
        return cls(model=model)


def resolve_path() -> Path:
    """
    Locate the config file in the platform's user config directory.

    Returns:
        Path to tell.toml (e.g. ~/.config/tell.toml on Linux)

    Raises:
        ConfigDirectoryError: If no config directory can be determined
    """
    try:
        config_dir = user_config_dir()
    except (KeyError, RuntimeError, OSError) as e:
        raise ConfigDirectoryError(f"Failed to get config directory: {e}") from e

    # expanduser() leaves "~" in place when HOME is not available
    if not config_dir or config_dir.startswith("~"):
        raise ConfigDirectoryError("Failed to get config directory")

    return Path(config_dir) / CONFIG_FILENAME


def load(path: Path) -> Config:
    """
    Load the config, creating it with defaults on first run.

    Args:
        path: Location of the config file

    Returns:
        The stored Config, or a freshly saved default one

    Raises:
        ConfigParseError: If the file is not valid TOML or lacks 'model'
        OSError: If the file cannot be read or the default cannot be written
    """
    path = Path(path)
    if not path.exists():
        config = Config()
        save(path, config)
        logger.info(f"Created default config at {path} (model={config.model})")
        return config

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigParseError(path, str(e)) from e

    config = Config.from_dict(data, path)
    logger.debug(f"Loaded config from {path}: {config}")
    return config


def save(path: Path, config: Config) -> None:
    """Write the config to path, replacing whatever is there."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomli_w.dumps(config.to_dict()), encoding="utf-8")
    logger.debug(f"Saved config to {path}")
