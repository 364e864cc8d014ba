"""
Configuration management for license-finder.

Settings come from defaults, an optional YAML/JSON config file, and
environment variables, in that order of precedence.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console

from .error_handling import ErrorCategory, get_error_handler
from .structured_logging import configure_logging

console = Console(stderr=True)


@dataclass
class TrackingConfig:
    """Dependency reconciliation settings."""

    managed_source: str = "bundle"
    unknown_license: str = "other"
    reset_approval_on_license_change: bool = True


@dataclass
class RenderingConfig:
    """Text and HTML rendering settings."""

    html_title: str = "Dependencies"
    show_parents_in_text: bool = False


@dataclass
class LoggingConfig:
    """Logging and error handling configuration."""

    log_level: str = "WARNING"
    enable_json: bool = True


@dataclass
class LicenseFinderConfig:
    """Main configuration containing all subsections."""

    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_global_config: Optional[LicenseFinderConfig] = None

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_config_values(config: LicenseFinderConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    managed_source = config.tracking.managed_source
    if not isinstance(managed_source, str) or not managed_source:
        errors.append("tracking.managed_source must be a non-empty string")
    if not isinstance(config.tracking.unknown_license, str):
        errors.append("tracking.unknown_license must be a string")
    if not isinstance(config.tracking.reset_approval_on_license_change, bool):
        errors.append("tracking.reset_approval_on_license_change must be a boolean")

    if not isinstance(config.rendering.html_title, str):
        errors.append("rendering.html_title must be a string")
    if not isinstance(config.rendering.show_parents_in_text, bool):
        errors.append("rendering.show_parents_in_text must be a boolean")

    if str(config.logging.log_level).upper() not in _LOG_LEVELS:
        errors.append(f"logging.log_level must be one of {', '.join(_LOG_LEVELS)}")
    if not isinstance(config.logging.enable_json, bool):
        errors.append("logging.enable_json must be a boolean")

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from file."""
    if not config_path.exists():
        return None

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() in [".yaml", ".yml"]:
                return yaml.safe_load(f)
            elif config_path.suffix.lower() == ".json":
                return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        get_error_handler().warning(
            ErrorCategory.CONFIGURATION,
            f"Could not load config file {config_path}",
            "config",
            "load_config_file",
            exception=e,
            details={"path": str(config_path)},
        )

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".license-finder.yaml",
        Path.cwd() / ".license-finder.yml",
        Path.cwd() / ".license-finder.json",
        Path.home() / ".config" / "license-finder" / "config.yaml",
        Path.home() / ".config" / "license-finder" / "config.json",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: LicenseFinderConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool) -> bool:
        value = os.environ.get(key, "").lower()
        return value in ["true", "1", "yes", "on"] if value else default

    if managed_source := os.environ.get("LICENSE_FINDER_MANAGED_SOURCE"):
        config.tracking.managed_source = managed_source
    if unknown_license := os.environ.get("LICENSE_FINDER_UNKNOWN_LICENSE"):
        config.tracking.unknown_license = unknown_license
    config.tracking.reset_approval_on_license_change = get_env_bool(
        "LICENSE_FINDER_RESET_APPROVAL",
        config.tracking.reset_approval_on_license_change,
    )

    if html_title := os.environ.get("LICENSE_FINDER_HTML_TITLE"):
        config.rendering.html_title = html_title

    if log_level := os.environ.get("LICENSE_FINDER_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            get_error_handler().warning(
                ErrorCategory.CONFIGURATION,
                f"Unknown config key {section_name}.{key}",
                "config",
                "apply_config_section",
                details={"section": section_name, "key": key},
            )


def load_config() -> LicenseFinderConfig:
    """Load configuration from file and environment."""
    global _global_config

    if _global_config is not None:
        return _global_config

    config = LicenseFinderConfig()

    config_file = find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if isinstance(file_config, dict):
            for section_name in ("tracking", "rendering", "logging"):
                section_data = file_config.get(section_name)
                if isinstance(section_data, dict):
                    apply_config_section(
                        getattr(config, section_name), section_data, section_name
                    )

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        for error in validation_errors:
            get_error_handler().warning(
                ErrorCategory.CONFIGURATION,
                error,
                "config",
                "load_config",
                suggestions=["Fix the value in the config file or environment"],
            )
        console.print("⚠️  Invalid configuration; using default values.", style="yellow")
        config = LicenseFinderConfig()

    configure_logging(config.logging.log_level, config.logging.enable_json)

    _global_config = config
    return config


def get_config() -> LicenseFinderConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None


def create_sample_config() -> str:
    """Generate a sample YAML configuration."""
    sample_config = {
        "tracking": {
            "managed_source": "bundle",
            "unknown_license": "other",
            "reset_approval_on_license_change": True,
        },
        "rendering": {
            "html_title": "Dependencies",
            "show_parents_in_text": False,
        },
        "logging": {
            "log_level": "WARNING",
            "enable_json": True,
        },
    }

    return yaml.safe_dump(sample_config, sort_keys=False, default_flow_style=False)
