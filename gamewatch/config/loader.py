"""Loading ``config.yaml`` and the environment into validated objects."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

DEFAULT_CONFIG_LOCATIONS = (Path("config.yaml"), Path("config") / "config.yaml")


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, EnvironmentConfig]:
    """Load the YAML configuration and environment variables.

    When ``config_path`` is None the file is looked up in
    ``DEFAULT_CONFIG_LOCATIONS``, in order.

    Returns:
        Validated ``(AppConfig, EnvironmentConfig)``

    Raises:
        ConfigurationError: If the file is missing, unparseable or invalid, or
            an environment variable is invalid
    """
    config_file = _find_config_file(config_path)
    config_dict = _read_yaml(config_file)

    if config_dict is None:
        raise ConfigurationError(
            "Configuration file is empty",
            suggestions=[
                "Copy config.example.yaml to config.yaml",
                "An empty mapping ('{}') is enough to run with defaults",
            ],
        )
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(config_dict).__name__}",
            suggestions=["Review config.example.yaml for the expected layout"],
        )

    found = check_for_warnings(config_dict)
    if found:
        emit_warnings(found)

    app_config = validate_app_config(config_dict)
    env_config = load_environment_config()
    return app_config, env_config


def validate_app_config(config_dict: Dict[str, Any]) -> AppConfig:
    """Validate a raw mapping, converting Pydantic errors to ``ConfigurationError``."""
    try:
        return AppConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed",
            errors=format_validation_errors(e),
            suggestions=[
                "Review config.example.yaml for correct format",
                "Durations look like '30s', '15m', '6h', '1d' or 'PT15M'",
            ],
        ) from e


def format_validation_errors(error: ValidationError) -> List[str]:
    """Flatten a Pydantic ``ValidationError`` into one line per problem."""
    lines = []
    for item in error.errors():
        field_path = " -> ".join(str(part) for part in item["loc"]) or "<root>"
        error_type = item["type"]
        if error_type == "missing":
            lines.append(f"Missing required field: {field_path}")
        elif error_type in ("string_type", "int_type", "bool_type", "list_type", "int_parsing"):
            expected = error_type.split("_")[0]
            lines.append(
                f"Invalid type for '{field_path}': expected {expected}, got {item.get('input')!r}"
            )
        else:
            lines.append(f"{field_path}: {item['msg']}")
    return lines


def _read_yaml(config_file: Path) -> Any:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} exists and is readable"],
        ) from e


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[f"Ensure {config_path} exists", "Check the path and try again"],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Configuration file not found",
        errors=[f"Tried: {candidate}" for candidate in DEFAULT_CONFIG_LOCATIONS],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            "Use --config to point at a custom location",
        ],
    )


def validate_config_file(config_path: Path) -> bool:
    """Validate a config file without touching the environment. Prints the outcome."""
    try:
        validate_app_config(_read_yaml(config_path) or {})
    except ConfigurationError as e:
        print(f"✗ Configuration validation failed:\n{e}")
        return False
    print(f"✓ Configuration file {config_path} is valid")
    return True
