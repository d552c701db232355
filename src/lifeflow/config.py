"""Central Configuration System for lifeflow.

This module is the single source of truth for application configuration.
The engine components take their settings as plain objects; this module
assembles those objects from a YAML file, environment variables and
in-code defaults.

Configuration priority (highest wins):
1. Environment variables (LIFEFLOW_*, nested with "__")
2. Config file (YAML)
3. In-code defaults

Example:
    >>> from lifeflow.config import get_config
    >>>
    >>> cfg = get_config()
    >>> print(cfg.clustering.day_threshold)  # 8 by default

Config File Format (YAML):
    ```yaml
    clustering:
      year_threshold: 1
      month_threshold: 1
      week_threshold: 1
      day_threshold: 8
      proximity_gap_days: 7

    layout:
      card_width: 280
      gutter: 24
      max_card_shift: 120
      min_label_spacing: 40

    river:
      lane_width: 150
      pixels_per_day: 3

    view:
      orientation: vertical   # vertical | horizontal
      display_mode: maximal   # minimal | maximal
      zoom_level: 0.5
      viewport_width: 800
      viewport_height: 600

    debug: false
    verbose: false
    ```

Environment example:
    LIFEFLOW_CLUSTERING__DAY_THRESHOLD=3 overrides clustering.day_threshold.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from lifeflow.core.models import Size
from lifeflow.core.view_state import (
    TimelineDisplayMode,
    TimelineOrientation,
    TimelineViewState,
)
from lifeflow.engine.clustering import ClusteringConfig
from lifeflow.engine.layout import LayoutConfig
from lifeflow.engine.river import RiverFlowConfig

logger = logging.getLogger(__name__)

# Searched in order when no explicit path is given
DEFAULT_CONFIG_PATHS = (
    Path("./lifeflow.yaml"),
    Path("./lifeflow.yml"),
    Path.home() / ".lifeflow" / "config.yaml",
)


# =============================================================================
# Exceptions
# =============================================================================


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileError(ConfigError):
    """Exception raised for YAML config file issues.

    Raised when an explicitly requested config file does not exist or
    cannot be read.
    """

    pass


# =============================================================================
# Configuration Sections
# =============================================================================


class ViewConfig(BaseModel):
    """Initial view settings used by the CLI and hosts without saved state.

    Attributes:
        orientation: Axis direction.
        display_mode: Cards (maximal) or markers only (minimal).
        zoom_level: Initial zoom level in [0, 1].
        viewport_width: Viewport width in pixels.
        viewport_height: Viewport height in pixels.
    """

    orientation: TimelineOrientation = TimelineOrientation.VERTICAL
    display_mode: TimelineDisplayMode = TimelineDisplayMode.MAXIMAL
    zoom_level: float = Field(default=0.5, ge=0.0, le=1.0)
    viewport_width: float = Field(default=800.0, gt=0)
    viewport_height: float = Field(default=600.0, gt=0)

    @property
    def viewport(self) -> Size:
        return Size(width=self.viewport_width, height=self.viewport_height)

    def to_view_state(self) -> TimelineViewState:
        """Build the initial view state."""
        return TimelineViewState(
            orientation=self.orientation,
            display_mode=self.display_mode,
            zoom_level=self.zoom_level,
        )


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Combines all configuration sections and supports loading from environment
    variables with the LIFEFLOW_ prefix.

    Attributes:
        clustering: Clustering thresholds.
        layout: Card and marker dimensions.
        river: River view geometry.
        view: Initial view settings.
        debug: Enable debug logging.
        verbose: Enable verbose output to console.
    """

    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    river: RiverFlowConfig = Field(default_factory=RiverFlowConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    debug: bool = Field(default=False, description="Enable debug mode.")
    verbose: bool = Field(default=False, description="Enable verbose output.")

    model_config = {
        "env_prefix": "LIFEFLOW_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore unknown fields for forward compatibility
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; environment wins over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def log_level(self) -> str:
        if self.debug:
            return "DEBUG"
        if self.verbose:
            return "INFO"
        return "WARNING"


# =============================================================================
# Module-Level Functions
# =============================================================================


def find_config_file(path: Path | None = None) -> Path | None:
    """Resolve the config file to load.

    Args:
        path: Explicit path. Must exist when given.

    Returns:
        Path of the file to load, or None when no default file exists.

    Raises:
        ConfigFileError: If an explicit path does not exist.
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.is_file():
            raise ConfigFileError(f"Config file not found: {path}")
        return path

    for candidate in DEFAULT_CONFIG_PATHS:
        if candidate.is_file():
            return candidate
    return None


def read_config_file(config_file: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict.

    Malformed or non-mapping content logs a warning and yields {}.

    Raises:
        ConfigFileError: If the file cannot be read.
    """
    try:
        content = config_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(f"Failed to read config file {config_file}: {e}") from e

    if not content.strip():
        return {}

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse config file {config_file}: {e}. Using defaults.")
        return {}

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.warning(f"Config file {config_file} has unexpected format. Using defaults.")
        return {}
    return loaded


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from file, environment, and defaults.

    If no config file is found, uses defaults only (not an error).
    If the config file is malformed, logs a warning and uses defaults.

    Args:
        path: Optional path to config file. If None, searches default locations.

    Returns:
        Fully-populated AppConfig instance.

    Raises:
        ConfigFileError: If an explicit path does not exist or is unreadable.

    Example:
        >>> config = load_config()  # Defaults and env vars
        >>> config = load_config(Path("./my-config.yaml"))  # Specific file
    """
    config_file = find_config_file(path)
    config_data = read_config_file(config_file) if config_file is not None else {}
    if config_file is not None:
        logger.debug(f"Loaded config file {config_file}")

    try:
        return AppConfig(**config_data)
    except ValidationError as e:
        logger.warning(f"Error parsing config values: {e.error_count()} invalid. Using defaults.")
        return AppConfig()


@functools.lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the cached configuration singleton.

    Returns:
        Cached AppConfig instance.
    """
    return load_config()


def reset_config() -> None:
    """Clear the configuration cache for testing.

    After calling this, the next call to get_config() will reload
    configuration from sources.
    """
    get_config.cache_clear()
