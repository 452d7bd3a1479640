"""Configuration loading and management for gitrends.

Configuration sources are merged in priority order:
    1. Defaults (defined in GitrendsConfig)
    2. Global config (~/.gitrends.toml)
    3. Project config (./gitrends.toml)
    4. Explicit config file
    5. Environment variables (GITRENDS_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(source_dir="~/src/project", coupling_min_revisions=5)
    >>> config.coupling_min_revisions
    5
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

# Rule and state files looked up inside the data directory
IGNORE_FILE = "ignore.txt"
MODULES_FILE = "modules.txt"
AUTHORS_FILE = "authors.txt"
STATE_FILE = "state.json"


@dataclass(frozen=True)
class GitrendsConfig:
    """Configuration for indexing and analytics.

    Attributes:
        Locations:
            source_dir: Git working tree (or bare repository) to index
            data_dir: Directory holding the index tables, rule files and state

        Active view:
            min_date: Inclusive lower bound on revision timestamps (epoch seconds)
            max_date: Inclusive upper bound on revision timestamps (epoch seconds)

        Change coupling structure:
            coupling_min_revisions: Minimum co-changing revisions kept in the tree
            coupling_min_ratio: Minimum coupling ratio kept in the tree

        Output control:
            max_entries: Default length of ranked reports
            top_authors: Authors listed in the summary
            verbosity: Logging verbosity level

        Git integration:
            git_timeout_seconds: Timeout for a single git subprocess call
    """

    source_dir: str = "."
    data_dir: str = ".gitrends"

    min_date: Optional[int] = None
    max_date: Optional[int] = None

    coupling_min_revisions: int = 15
    coupling_min_ratio: float = 0.2

    max_entries: int = 100
    top_authors: int = 10
    verbosity: Verbosity = "normal"

    git_timeout_seconds: int = 120

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.min_date is not None and self.max_date is not None:
            if self.min_date > self.max_date:
                raise InvalidConfigError("min_date", self.min_date, "must not exceed max_date")

        if self.coupling_min_revisions < 0:
            raise InvalidConfigError(
                "coupling_min_revisions", self.coupling_min_revisions, "must be non-negative"
            )
        if not 0.0 <= self.coupling_min_ratio <= 1.0:
            raise InvalidConfigError(
                "coupling_min_ratio", self.coupling_min_ratio, "must be between 0.0 and 1.0"
            )

        if self.max_entries < 1:
            raise InvalidConfigError("max_entries", self.max_entries, "must be at least 1")
        if self.top_authors < 0:
            raise InvalidConfigError("top_authors", self.top_authors, "must be non-negative")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")

        if self.git_timeout_seconds < 1:
            raise InvalidConfigError(
                "git_timeout_seconds", self.git_timeout_seconds, "must be at least 1"
            )

    @property
    def source_path(self) -> Path:
        return Path(self.source_dir).expanduser()

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def state_file(self) -> Path:
        return self.data_path / STATE_FILE


def load_config(config_file: Optional[Path] = None, **overrides) -> GitrendsConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so that unset CLI options keep lower-priority
            settings.

    Returns:
        Validated GitrendsConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".gitrends.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "gitrends.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return GitrendsConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from GITRENDS_* environment variables.

    Every GitrendsConfig field can be set this way, e.g. GITRENDS_DATA_DIR,
    GITRENDS_MIN_DATE or GITRENDS_COUPLING_MIN_RATIO.
    """
    type_hints = get_type_hints(GitrendsConfig)

    result: dict[str, Any] = {}

    for field_name in GitrendsConfig.__dataclass_fields__:
        env_key = f"GITRENDS_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type."""
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        if value.strip().lower() in ("", "none", "null"):
            return None
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Accept both a flat file and a [gitrends] table
    section = data.get("gitrends")
    if isinstance(section, dict):
        return section
    return data
