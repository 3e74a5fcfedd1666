"""Configuration loader and validator for cdoc.

Loads settings from configs/config.yaml and provides typed access
to all configuration sections via dataclasses.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from cdoc.errors import ConfigurationError
from cdoc.parsers.syntax import SYNTAXES

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"

_DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class ParserConfig:
    """Configuration for documentation extraction.

    Attributes:
        extensions: Extra file extensions mapped to comment syntax names.
        tag_marker: Symbol that introduces a tag line.
        default_syntax: Syntax used for extensions without a mapping,
            or None to render such files as undocumented.
    """

    extensions: dict[str, str] = field(default_factory=dict)
    tag_marker: str = "@"
    default_syntax: Optional[str] = "c-style"


@dataclass
class OutputConfig:
    """Configuration for documentation output."""

    extension: str = ".md"
    placeholder: str = "No documentation found."


@dataclass
class TraversalConfig:
    """Configuration for source tree traversal.

    Attributes:
        ignore: Ignore patterns applied in addition to the ones given
            on the command line.
        follow_symlinks: Whether symbolic links are followed.
    """

    ignore: list[str] = field(default_factory=list)
    follow_symlinks: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "WARNING"
    format: str = _DEFAULT_LOG_FORMAT
    file: Optional[str] = None


@dataclass
class AppConfig:
    """Top-level application configuration."""

    parser: ParserConfig = field(default_factory=ParserConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    traversal: TraversalConfig = field(default_factory=TraversalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_parser_config(data: dict) -> ParserConfig:
    """Build a ParserConfig from a dictionary.

    Args:
        data: Dictionary with parser settings.

    Returns:
        A validated ParserConfig instance.

    Raises:
        ConfigurationError: If an extension or the default maps to an
            unknown syntax, or the tag marker is empty.
    """
    extensions = {}
    for suffix, name in (data.get("extensions") or {}).items():
        if name not in SYNTAXES:
            raise ConfigurationError(
                f"parser.extensions: unknown syntax {name!r} for {suffix!r}"
            )
        suffix = str(suffix)
        extensions[suffix if suffix.startswith(".") else f".{suffix}"] = name

    tag_marker = str(data.get("tag_marker", "@"))
    if not tag_marker.strip():
        raise ConfigurationError("parser.tag_marker must not be empty")

    default_syntax = data.get("default_syntax", "c-style")
    if default_syntax is not None and default_syntax not in SYNTAXES:
        raise ConfigurationError(f"parser.default_syntax: unknown syntax {default_syntax!r}")

    return ParserConfig(
        extensions=extensions, tag_marker=tag_marker, default_syntax=default_syntax
    )


def _build_output_config(data: dict) -> OutputConfig:
    """Build an OutputConfig from a dictionary.

    Args:
        data: Dictionary with output settings.

    Returns:
        A validated OutputConfig instance.

    Raises:
        ConfigurationError: If the extension is not of the form ``.ext``.
    """
    extension = str(data.get("extension", ".md"))
    if not extension.startswith(".") or "/" in extension or len(extension) < 2:
        raise ConfigurationError(f"output.extension must look like '.md', got {extension!r}")

    return OutputConfig(
        extension=extension,
        placeholder=data.get("placeholder", "No documentation found."),
    )


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    Reads the YAML config file and constructs a fully typed AppConfig
    object. Falls back to defaults for any missing values.

    Args:
        config_path: Path to the YAML config file. If None, uses the
            default path at configs/config.yaml.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ConfigurationError: If the file is not valid YAML or holds
            invalid values.
    """
    path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("Config file not found at %s, using defaults", path)
        return AppConfig()

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    logger.debug("Loaded configuration from %s", path)

    traversal_data = raw.get("traversal") or {}
    traversal_config = TraversalConfig(
        ignore=[str(p) for p in traversal_data.get("ignore") or []],
        follow_symlinks=bool(traversal_data.get("follow_symlinks", True)),
    )

    logging_data = raw.get("logging") or {}
    logging_config = LoggingConfig(
        level=logging_data.get("level", "WARNING"),
        format=logging_data.get("format", _DEFAULT_LOG_FORMAT),
        file=logging_data.get("file"),
    )

    return AppConfig(
        parser=_build_parser_config(raw.get("parser") or {}),
        output=_build_output_config(raw.get("output") or {}),
        traversal=traversal_config,
        logging=logging_config,
    )
