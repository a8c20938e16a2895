"""Configuration loading utilities.

Values are layered: schema defaults, then a YAML file, then CLI-style
dotlist overrides. The merged result is converted back into the typed
dataclasses of :mod:`fenwatch.core.configs.schema` so validation runs once.
"""

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf

from fenwatch.core.configs.schema import AppConfig, config_from_dict, config_to_dict


def load_config(config_path: str | Path, overrides: list[str] | None = None) -> DictConfig:
    """Load a YAML configuration file with optional overrides.

    Args:
        config_path: Path to the YAML configuration file.
        overrides: Optional list of CLI-style overrides (e.g., ["stabilizer.max_wait=2.0"]).

    Returns:
        Merged configuration as a DictConfig.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    config = OmegaConf.load(config_path)

    if overrides:
        config = OmegaConf.merge(config, OmegaConf.from_dotlist(overrides))

    return config


def load_app_config(
    config_path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> AppConfig:
    """Load the typed application configuration.

    Args:
        config_path: Optional path to a YAML configuration file.
        overrides: Optional list of CLI-style overrides.

    Returns:
        Validated AppConfig instance.
    """
    merged = OmegaConf.create(config_to_dict(AppConfig()))

    if config_path is not None:
        merged = OmegaConf.merge(merged, load_config(config_path))

    if overrides:
        merged = OmegaConf.merge(merged, OmegaConf.from_dotlist(overrides))

    data = OmegaConf.to_container(merged, resolve=True)
    return config_from_dict(data)  # type: ignore[arg-type]


def save_config(config: AppConfig | DictConfig | dict[str, Any], path: str | Path) -> None:
    """Save a configuration to a YAML file.

    Args:
        config: Configuration to save.
        path: Path to save the configuration to.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(config, AppConfig):
        config = config_to_dict(config)
    if isinstance(config, dict):
        config = OmegaConf.create(config)

    OmegaConf.save(config, path)
