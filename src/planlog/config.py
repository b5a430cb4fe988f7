"""Configuration loader for planlog.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .adapters.annotations import DEFAULT_EXTRA_LETTERS

CONFIG_NAME = "planlog.toml"
DEFAULT_STATE_PATH = Path(".planlog") / "state.json"


@dataclass
class StorageConfig:
    """Where and how the snapshot is stored."""
    path: Path
    format: str | None = None  # "json" | "yaml"; None infers from suffix


@dataclass
class ParserConfig:
    """Annotation parser configuration."""
    extra_letters: str = DEFAULT_EXTRA_LETTERS


@dataclass
class DisplayConfig:
    """How many results each listing shows."""
    query_limit: int = 10
    view_limit: int = 5
    backlink_limit: int = 30
    views_shown: int = 10
    tag_limit: int = 30
    shorten: int = 120


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class PlanlogConfig:
    """Complete planlog configuration."""
    storage: StorageConfig
    parser: ParserConfig = field(default_factory=ParserConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None, data_path: Path | None = None) -> PlanlogConfig:
    """
    Load configuration from planlog.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/planlog.toml
    3. directory of data_path/planlog.toml

    Args:
        config_path: Explicit path to config file
        data_path: Snapshot file path for fallback search

    Returns:
        PlanlogConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if data_path:
        search_paths.append(data_path.parent / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    storage_data = toml_data.get("storage", {})
    storage_config = StorageConfig(
        path=Path(storage_data.get("path", data_path or DEFAULT_STATE_PATH)),
        format=storage_data.get("format"),
    )

    parser_data = toml_data.get("parser", {})
    parser_config = ParserConfig(
        extra_letters=parser_data.get("extra_letters", DEFAULT_EXTRA_LETTERS),
    )

    display_data = toml_data.get("display", {})
    defaults = DisplayConfig()
    display_config = DisplayConfig(
        query_limit=int(display_data.get("query_limit", defaults.query_limit)),
        view_limit=int(display_data.get("view_limit", defaults.view_limit)),
        backlink_limit=int(display_data.get("backlink_limit", defaults.backlink_limit)),
        views_shown=int(display_data.get("views_shown", defaults.views_shown)),
        tag_limit=int(display_data.get("tag_limit", defaults.tag_limit)),
        shorten=int(display_data.get("shorten", defaults.shorten)),
    )

    logging_data = toml_data.get("logging", {})
    logging_config = LoggingConfig(level=str(logging_data.get("level", "WARNING")).upper())

    return PlanlogConfig(
        storage=storage_config,
        parser=parser_config,
        display=display_config,
        logging=logging_config,
    )
