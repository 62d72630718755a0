"""Configuration model for the JD file organizer."""

from pathlib import Path
from typing import Any, Dict
import json
from dataclasses import dataclass, field, fields, is_dataclass, asdict

import jsonschema

from ..exceptions import ConfigurationError
from .operations import ConflictStrategy

DEFAULT_DATA_DIR = Path.home() / ".cache" / "jd-organizer"

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "database_path": {"type": "string", "minLength": 1},
        "undo_log_path": {"type": "string", "minLength": 1},
        "move": {
            "type": "object",
            "properties": {
                "default_conflict_strategy": {
                    "type": "string",
                    "enum": [s.value for s in ConflictStrategy],
                },
                "max_unique_name_attempts": {"type": "integer", "minimum": 1, "maximum": 100000},
                "verify_checksum": {"type": "boolean"},
                "stop_on_error": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "rename": {
            "type": "object",
            "properties": {
                "max_undo_logs": {"type": "integer", "minimum": 1, "maximum": 1000},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


@dataclass
class MoveConfig:
    """Configuration for file moves."""
    default_conflict_strategy: str = ConflictStrategy.RENAME.value
    max_unique_name_attempts: int = 100
    verify_checksum: bool = False
    stop_on_error: bool = False

    @property
    def conflict_strategy(self) -> ConflictStrategy:
        return ConflictStrategy(self.default_conflict_strategy)


@dataclass
class RenameConfig:
    """Configuration for batch renames."""
    max_undo_logs: int = 10


@dataclass
class Config:
    """Main configuration model."""
    database_path: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "organizer.db")
    undo_log_path: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "rename_undo.json")
    move: MoveConfig = field(default_factory=MoveConfig)
    rename: RenameConfig = field(default_factory=RenameConfig)

    @classmethod
    def default(cls) -> "Config":
        """Create a configuration with all defaults."""
        return cls()


def _dataclass_to_dict(obj):
    """Convert dataclass to dict recursively."""
    if is_dataclass(obj):
        return {key: _dataclass_to_dict(value) for key, value in asdict(obj).items()}
    elif isinstance(obj, Path):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: _dataclass_to_dict(value) for key, value in obj.items()}
    return obj


def _dict_to_dataclass(data, dataclass_type):
    """Convert dict to dataclass recursively."""
    if not is_dataclass(dataclass_type):
        return data

    kwargs = {}
    for f in fields(dataclass_type):
        if f.name not in data:
            continue
        if isinstance(f.type, type) and is_dataclass(f.type):
            kwargs[f.name] = _dict_to_dataclass(data[f.name], f.type)
        elif f.type is Path:
            kwargs[f.name] = Path(data[f.name]).expanduser()
        else:
            kwargs[f.name] = data[f.name]

    return dataclass_type(**kwargs)


def validate_config_dict(data: Dict[str, Any]) -> None:
    """Validate raw configuration data against the schema."""
    try:
        jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        location = ".".join(str(p) for p in e.absolute_path) or "root"
        raise ConfigurationError(f"Invalid configuration at {location}: {e.message}") from e


def load_config(config_path: Path) -> Config:
    """Load configuration from JSON file."""
    try:
        with open(config_path, 'r') as f:
            config_data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file is not valid JSON: {e}") from e

    validate_config_dict(config_data)
    return _dict_to_dataclass(config_data, Config)


def save_config(config: Config, config_path: Path) -> None:
    """Save configuration to JSON file."""
    config_dict = _dataclass_to_dict(config)
    validate_config_dict(config_dict)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        json.dump(config_dict, f, indent=2)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    save_config(Config.default(), config_path)
