"""
Configuration Management for Dota Companion

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables

Configuration precedence (highest to lowest):
1. Environment variables
2. Configuration file
3. Default values

Secrets (JWT secret, STRATZ token, Steam API key) are never required at load
time; the code that needs one raises ConfigError when it is missing.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    # Target origin of the Steam login postMessage; "*" delivers to any opener
    frontend_origin: str = "*"


@dataclass
class ProvidersConfig:
    """Configuration for the third-party statistics providers."""

    opendota_url: str = "https://api.opendota.com/api"
    # Hero icon/image paths in the OpenDota catalog are relative to this host
    opendota_cdn_url: str = "https://api.opendota.com"
    stratz_url: str = "https://api.stratz.com/graphql"
    stratz_token: str = ""
    timeout_seconds: float = 10.0


@dataclass
class AuthConfig:
    """Configuration for token issuance and Steam OpenID."""

    jwt_secret: str = ""
    jwt_expiry_days: int = 7
    steam_api_key: str = ""
    # Empty means "derive from the incoming request"
    steam_return_url: str = ""
    steam_realm: str = ""


@dataclass
class DatabaseConfig:
    """Configuration for the user/player store."""

    url: str = "sqlite:///" + str(Path.home() / ".dotacompanion" / "dotacompanion.db")


@dataclass
class StatsConfig:
    """Configuration for the stats aggregation pipeline."""

    recent_matches_limit: int = 20
    top_heroes_limit: int = 5
    # Upper bound for one whole /stats computation; exceeding it yields fallback data
    request_timeout_seconds: float = 25.0
    # Optional YAML/JSON file mapping hero id -> list of role labels
    hero_roles_file: str | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class AppConfig:
    """Main configuration container."""

    server: ServerConfig = field(default_factory=ServerConfig)
    providers: ProvidersConfig = field(default_factory=ProvidersConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ============================================================================
# Configuration Loading
# ============================================================================


def get_default_config_paths() -> list[Path]:
    """Get the default paths to search for configuration files."""
    paths = []

    # Current directory
    paths.append(Path.cwd() / "dotacompanion.yaml")
    paths.append(Path.cwd() / "dotacompanion.toml")
    paths.append(Path.cwd() / "dotacompanion.json")

    # XDG config directory
    home = Path.home()
    xdg_config = os.environ.get("XDG_CONFIG_HOME", str(home / ".config"))
    paths.append(Path(xdg_config) / "dotacompanion" / "config.yaml")
    paths.append(Path(xdg_config) / "dotacompanion" / "config.toml")

    return paths


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file."""
    import yaml

    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file."""
    import tomllib

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from a JSON file."""
    with open(path) as f:
        return json.load(f)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration from a file, detecting format from extension."""
    if not path.exists():
        return {}

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return load_yaml_config(path)
    elif suffix == ".toml":
        return load_toml_config(path)
    elif suffix == ".json":
        return load_json_config(path)
    else:
        logger.warning(f"Unknown config file format: {suffix}")
        return {}


# Environment variable -> (section, key)
ENV_MAPPINGS = {
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "FRONTEND_ORIGIN": ("server", "frontend_origin"),
    "OPENDOTA_API_URL": ("providers", "opendota_url"),
    "STRATZ_API_URL": ("providers", "stratz_url"),
    "STRATZ_API_TOKEN": ("providers", "stratz_token"),
    "PROVIDER_TIMEOUT_SECONDS": ("providers", "timeout_seconds"),
    "JWT_SECRET": ("auth", "jwt_secret"),
    "JWT_EXPIRY_DAYS": ("auth", "jwt_expiry_days"),
    "STEAM_API_KEY": ("auth", "steam_api_key"),
    "STEAM_CALLBACK_URL": ("auth", "steam_return_url"),
    "STEAM_REALM": ("auth", "steam_realm"),
    "DATABASE_URL": ("database", "url"),
    "DOTACOMPANION_RECENT_MATCHES": ("stats", "recent_matches_limit"),
    "DOTACOMPANION_TOP_HEROES": ("stats", "top_heroes_limit"),
    "DOTACOMPANION_STATS_TIMEOUT": ("stats", "request_timeout_seconds"),
    "DOTACOMPANION_HERO_ROLES_FILE": ("stats", "hero_roles_file"),
    "DOTACOMPANION_LOG_LEVEL": ("logging", "level"),
}

# Values that must stay strings even when they look numeric
_STRING_KEYS = {"stratz_token", "jwt_secret", "steam_api_key", "host", "frontend_origin"}


def load_env_config(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Load configuration from environment variables."""
    environ = os.environ if environ is None else environ
    config: dict[str, Any] = {}

    for env_var, (section, key) in ENV_MAPPINGS.items():
        value = environ.get(env_var)
        if value is None:
            continue
        config.setdefault(section, {})

        # Type conversion
        if key not in _STRING_KEYS:
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.isdigit():
                value = int(value)
            else:
                try:
                    value = float(value)
                except ValueError:
                    pass

        config[section][key] = value

    if "CORS_ORIGINS" in environ:
        origins = [o.strip() for o in environ["CORS_ORIGINS"].split(",") if o.strip()]
        config.setdefault("server", {})["cors_origins"] = origins

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def dict_to_config(data: dict[str, Any]) -> AppConfig:
    """Convert a dictionary to AppConfig, ignoring unknown keys."""
    config = AppConfig()

    for section_name in ("server", "providers", "auth", "database", "stats", "logging"):
        section = getattr(config, section_name)
        for key, value in (data.get(section_name) or {}).items():
            if hasattr(section, key):
                setattr(section, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {section_name}.{key}")

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> AppConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged AppConfig
    """
    config_data: dict[str, Any] = {}

    if config_file:
        config_data = load_config_file(config_file)
        logger.info(f"Loaded config from: {config_file}")
    else:
        for path in get_default_config_paths():
            if path.exists():
                config_data = load_config_file(path)
                logger.info(f"Loaded config from: {path}")
                break

    if include_env:
        config_data = merge_configs(config_data, load_env_config())

    return dict_to_config(config_data)


def config_to_dict(config: AppConfig, redact: bool = True) -> dict[str, Any]:
    """Convert AppConfig to a dictionary, masking secrets by default."""
    data = asdict(config)
    if redact:
        for section, key in (
            ("providers", "stratz_token"),
            ("auth", "jwt_secret"),
            ("auth", "steam_api_key"),
        ):
            if data[section][key]:
                data[section][key] = "***"
    return data


def configure_logging(config: LoggingConfig) -> None:
    """Apply the logging configuration to the root logger."""
    logging.basicConfig(level=config.level.upper(), format=config.format)
    logging.getLogger().setLevel(config.level.upper())
