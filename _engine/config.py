import json
import os
from enum import Enum
from typing import Any, Dict

from pydantic import ValidationError

from _data.openai import DEFAULT_LANGUAGE, DEFAULT_MODEL, MODEL_CONTEXT_LIMITS, SUPPORTED_LANGUAGES
from _engine.console import console
from _engine.errors import ConfigurationError
from _types.model import AppConfig


class ConfigKeys(str, Enum):
    OPENAI_API_BASEURL = "OPENAI_API_BASEURL"
    OPENAI_API_KEY = "OPENAI_API_KEY"
    OPENAI_API_MODEL = "OPENAI_API_MODEL"
    OPENAI_RESPONSE_LANGUAGE = "OPENAI_RESPONSE_LANGUAGE"
    OPENAI_CHUNK_SIZE_CHARS = "OPENAI_CHUNK_SIZE_CHARS"
    OPENAI_COMBINED_SIZE_CHARS = "OPENAI_COMBINED_SIZE_CHARS"


NUMERIC_KEYS = (ConfigKeys.OPENAI_CHUNK_SIZE_CHARS, ConfigKeys.OPENAI_COMBINED_SIZE_CHARS)


def get_config_directory() -> str:
    """Per-user config directory, overridable with ACR_CONFIG_DIR."""
    override = os.environ.get("ACR_CONFIG_DIR")
    if override:
        return override
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    return os.path.join(xdg_config_home, "ai-commit-review")


def get_config_file() -> str:
    return os.path.join(get_config_directory(), ".config.json")


def load_config() -> Dict[str, Any]:
    """
    Loads the raw configuration dictionary from the configuration file.

    Returns:
        Dict[str, Any]: The stored configuration, or an empty dict if the file
                        is missing or unreadable.
    """
    config_file = get_config_file()
    if not os.path.exists(config_file):
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError:
        console.print(
            f"[error]Error decoding JSON from config file: {config_file}. File might be corrupted.[/error]"
        )
        return {}
    except OSError as e:
        console.print(f"[error]Unexpected error reading config file {config_file}: {e}[/error]")
        return {}

    if not isinstance(config, dict):
        console.print(f"[warning]Config file '{config_file}' does not hold a JSON object.[/warning]")
        return {}
    return config


def save_config(config: Dict[str, Any]) -> None:
    config_file = get_config_file()
    try:
        os.makedirs(os.path.dirname(config_file), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        raise ConfigurationError(f"Error saving configuration to {config_file}: {e}") from e


def _apply_environment(config: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(config)
    for key in ConfigKeys:
        value = os.environ.get(key.value)
        if value:
            merged[key.value] = value
    return merged


def validate_configuration() -> AppConfig:
    """
    Load, default and validate the configuration.

    A missing model or language is defaulted and saved back, as the first run
    of the tool does. Environment variables of the same names take precedence
    over the file.

    Raises:
        ConfigurationError: if no API key is configured or a value is invalid.
    """
    config = load_config()
    changed = False
    if not config.get(ConfigKeys.OPENAI_API_MODEL.value):
        config[ConfigKeys.OPENAI_API_MODEL.value] = DEFAULT_MODEL
        console.print(f"[success]✅ OPENAI_API_MODEL not set. Defaulting to '{DEFAULT_MODEL}'.[/success]")
        changed = True
    if not config.get(ConfigKeys.OPENAI_RESPONSE_LANGUAGE.value):
        config[ConfigKeys.OPENAI_RESPONSE_LANGUAGE.value] = DEFAULT_LANGUAGE
        console.print(
            f"[success]✅ OPENAI_RESPONSE_LANGUAGE not set. Defaulting to "
            f"'{DEFAULT_LANGUAGE}: {SUPPORTED_LANGUAGES[DEFAULT_LANGUAGE]}'.[/success]"
        )
        changed = True
    if changed:
        save_config(config)

    merged = _apply_environment(config)
    if not merged.get(ConfigKeys.OPENAI_API_KEY.value):
        raise ConfigurationError(
            "OpenAI API key not configured.\n\n"
            "Use 'acr set_config OPENAI_API_KEY=your-key' to configure it."
        )

    try:
        return AppConfig.model_validate(
            {
                key.value: merged[key.value]
                for key in ConfigKeys
                if merged.get(key.value) not in (None, "")
            }
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def parse_config_assignment(config_string: str):
    """Split and validate a ``KEY=VALUE`` string. Returns ``(key, value)``."""
    index = config_string.find("=")
    if index == -1:
        raise ConfigurationError("Invalid format.\n\nUse 'acr set_config KEY=VALUE'")

    key = config_string[:index].strip().upper()
    value = config_string[index + 1 :].strip()
    if not key or not value:
        raise ConfigurationError("Invalid format.\n\nUse 'acr set_config KEY=VALUE'")

    valid_keys = [k.value for k in ConfigKeys]
    if key not in valid_keys:
        raise ConfigurationError(
            f'Invalid configuration key "{key}".\n\nAvailable keys:\n'
            + "\n".join(f"  - {k}" for k in valid_keys)
        )

    if key == ConfigKeys.OPENAI_API_MODEL.value and value not in MODEL_CONTEXT_LIMITS:
        raise ConfigurationError(
            "❌ Invalid AI model provided.\n\nAvailable models:\n"
            + "\n".join(f"  - {m}" for m in MODEL_CONTEXT_LIMITS)
        )

    if key == ConfigKeys.OPENAI_RESPONSE_LANGUAGE.value and value not in SUPPORTED_LANGUAGES:
        raise ConfigurationError(
            f'❌ Invalid language code "{value}" provided.\n\nSupported languages:\n'
            + "\n".join(f"  - {code}: {name}" for code, name in SUPPORTED_LANGUAGES.items())
        )

    if key in [k.value for k in NUMERIC_KEYS]:
        if not value.isdigit() or int(value) <= 0:
            raise ConfigurationError(f"{key} must be a positive integer, got '{value}'")
        return key, int(value)

    return key, value


def update_config_from_string(config_string: str) -> None:
    key, value = parse_config_assignment(config_string)
    config = load_config()
    config[key] = value
    save_config(config)
    console.print(f'\n[success]✅ Configuration "{key}" updated.[/success]')
