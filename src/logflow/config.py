"""
Configuration for logflow pipelines.

Pydantic models validate the configuration, TOML files persist it and
environment variables override it.

Example configuration file (~/.config/logflow/config.toml):
    levels = "std"
    threshold = "INFO"

    [show]
    timestamp = "local"
    pkg = true

    [transports.console]
    format = "text"

    [transports.influx]
    enabled = true
    url = "http://localhost:8086"
    org = "acme"
    bucket = "logs"
    token = "secret"
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

try:
    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib
except ImportError:
    tomllib = None

import tomli_w

from .exceptions import ConfigurationError, ConfigurationValidationError, InvalidConfigurationError
from .levels import LEVEL_PRESETS, create_levels
from .transports.formatters import OUTPUT_FORMATS


class ShowConfig(BaseModel):
    """Display options applied to every transport without its own override."""

    level: Union[bool, int, str] = Field(True, description="true, a pad width, or 'icon'")
    timestamp: Optional[Literal["utc", "local", "elapsed"]] = Field(None, description="Timestamp mode")
    pkg: bool = Field(False, description="Show the package chain")
    sid: bool = Field(False, description="Show the session id")
    req_id: bool = Field(False, description="Show the request id")
    elapsed: bool = Field(True, description="Show durations")
    data: bool = Field(True, description="Show structured data")
    color: bool = Field(True, description="Allow ANSI colour")
    pkg_sep: str = Field(".", min_length=1, description="Package chain separator")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: Union[bool, int, str]) -> Union[bool, int, str]:
        if isinstance(v, str) and v != "icon":
            raise ValueError("level must be a boolean, an integer width or 'icon'")
        return v


class TransportConfig(BaseModel):
    """Options shared by all transports."""

    enabled: bool = Field(False, description="Install this transport")
    threshold: Optional[str] = Field(None, description="Own threshold overriding the global one")


class FormattedTransportConfig(TransportConfig):
    format: str = Field("text", description="Output format: text, json, json-array")
    color: bool = Field(True, description="Colourise text output")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"format must be one of: {', '.join(OUTPUT_FORMATS)}")
        return v


class ConsoleTransportConfig(FormattedTransportConfig):
    enabled: bool = Field(True, description="Install this transport")
    use_stderr: bool = Field(False, description="Write to stderr instead of stdout")


class FileTransportConfig(FormattedTransportConfig):
    color: bool = Field(False, description="Colourise text output")
    path: Path = Field(Path("logs/logflow.log"), description="Log file path")
    mode: Literal["a", "w", "x"] = Field("a", description="Append, truncate or exclusive create")
    buffer_size: int = Field(4096, ge=0, description="Bytes buffered before writing")
    max_bytes: int = Field(10 * 1024 * 1024, ge=0, description="Rotate beyond this size (0 disables)")
    backup_count: int = Field(5, ge=0, le=100, description="Rotated files to keep")


class NetworkTransportConfig(TransportConfig):
    batch_size: int = Field(100, ge=1, description="Records that trigger an immediate flush")
    flush_interval: float = Field(5.0, ge=0, description="Seconds between timer flushes")
    max_buffer: int = Field(10_000, ge=1, description="Maximum buffered records")
    max_attempts: int = Field(3, ge=1, le=20, description="Delivery attempts per flush")
    base_delay: float = Field(1.0, ge=0, description="Backoff base in seconds")
    max_delay: float = Field(30.0, ge=0, description="Longest wait between attempts in seconds")
    timeout: float = Field(10.0, gt=0, description="Request timeout in seconds")

    @model_validator(mode="after")
    def validate_buffer(self) -> "NetworkTransportConfig":
        if self.max_buffer < self.batch_size:
            raise ValueError(f"max_buffer ({self.max_buffer}) must be at least batch_size ({self.batch_size})")
        return self


class InfluxTransportConfig(NetworkTransportConfig):
    url: Optional[str] = Field(None, description="InfluxDB base URL")
    org: str = Field("", description="Organisation")
    bucket: str = Field("", description="Bucket")
    token: Optional[str] = Field(None, description="API token")
    service: Optional[str] = Field(None, description="Service tag")
    environment: Optional[str] = Field(None, description="Environment tag")
    hostname: Optional[str] = Field(None, description="Host tag, defaults to this machine")
    measurement: str = Field("logs", min_length=1, description="Measurement name")

    @model_validator(mode="after")
    def validate_target(self) -> "InfluxTransportConfig":
        if self.enabled and not (self.url and self.org and self.bucket):
            raise ValueError("url, org and bucket are required when the influx transport is enabled")
        return self


class OtlpTransportConfig(NetworkTransportConfig):
    endpoint: str = Field("http://localhost:4318", description="OTLP/HTTP collector base URL")
    service_name: str = Field("logflow", description="service.name resource attribute")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")


class TransportsConfig(BaseModel):
    console: ConsoleTransportConfig = Field(default_factory=ConsoleTransportConfig)
    file: FileTransportConfig = Field(default_factory=FileTransportConfig)
    influx: InfluxTransportConfig = Field(default_factory=InfluxTransportConfig)
    otlp: OtlpTransportConfig = Field(default_factory=OtlpTransportConfig)


class LoggingConfig(BaseModel):
    """Main logflow configuration model."""

    levels: str = Field("std", description="Level preset: std, cli, min, otlp")
    threshold: Optional[str] = Field(None, description="Global threshold, defaults to the preset's default level")
    show: ShowConfig = Field(default_factory=ShowConfig)
    transports: TransportsConfig = Field(default_factory=TransportsConfig)

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
        "str_strip_whitespace": True,
    }

    @field_validator("levels")
    @classmethod
    def validate_levels(cls, v: str) -> str:
        v = v.lower()
        if v not in LEVEL_PRESETS:
            raise ValueError(f"levels must be one of: {', '.join(LEVEL_PRESETS)}")
        return v

    @model_validator(mode="after")
    def validate_thresholds(self) -> "LoggingConfig":
        registry = create_levels(self.levels)
        candidates = {"threshold": self.threshold}
        for name in ("console", "file", "influx", "otlp"):
            candidates[f"transports.{name}.threshold"] = getattr(self.transports, name).threshold
        for field, value in candidates.items():
            if value is not None and not registry.is_level(value):
                raise ValueError(f"{field} '{value}' is not a level of the '{self.levels}' preset")
        return self


class LogflowSettings(BaseSettings):
    """Settings that can be overridden by environment variables."""

    logflow_levels: Optional[str] = Field(None, alias="LOGFLOW_LEVELS")
    logflow_threshold: Optional[str] = Field(None, alias="LOGFLOW_THRESHOLD")
    logflow_format: Optional[str] = Field(None, alias="LOGFLOW_FORMAT")
    logflow_color: Optional[bool] = Field(None, alias="LOGFLOW_COLOR")
    logflow_file_path: Optional[str] = Field(None, alias="LOGFLOW_FILE_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _format_validation_error(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}" if location else item["msg"])
    return messages


def validate_config(data: Dict[str, Any]) -> LoggingConfig:
    """Build a LoggingConfig, raising ConfigurationValidationError on bad input."""
    try:
        return LoggingConfig(**data)
    except ValidationError as e:
        raise ConfigurationValidationError(_format_validation_error(e))


class ConfigManager:
    """Loads, overrides and persists logflow configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to custom config file. If None, uses default location.
        """
        if config_file:
            self.config_file = Path(config_file)
        else:
            self.config_file = Path.home() / ".config" / "logflow" / "config.toml"

        self._config: Optional[LoggingConfig] = None
        self._settings = LogflowSettings()

    @property
    def config_directory(self) -> Path:
        return self.config_file.parent

    def load_config(self) -> LoggingConfig:
        """Load and validate configuration from file and environment."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}
        if self.config_file.exists():
            config_data = self._load_toml_file()

        config_data = self._apply_env_overrides(config_data)
        self._config = validate_config(config_data)
        return self._config

    def _load_toml_file(self) -> Dict[str, Any]:
        """Load configuration from TOML file."""
        if tomllib is None:
            raise ConfigurationError(
                "TOML support not available",
                "Install the 'tomli' package: pip install tomli",
            )

        try:
            with open(self.config_file, "rb") as f:
                return tomllib.load(f)
        except FileNotFoundError:
            return {}
        except PermissionError as e:
            raise ConfigurationError(
                f"Cannot read configuration file: {e}",
                f"Check file permissions for {self.config_file}",
            )
        except tomllib.TOMLDecodeError as e:
            raise InvalidConfigurationError(str(self.config_file), str(e), "valid TOML format")

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        transports = config_data.setdefault("transports", {})
        console = transports.setdefault("console", {})

        if self._settings.logflow_levels:
            config_data["levels"] = self._settings.logflow_levels
        if self._settings.logflow_threshold:
            config_data["threshold"] = self._settings.logflow_threshold
        if self._settings.logflow_format:
            console["format"] = self._settings.logflow_format
        if self._settings.logflow_color is not None:
            console["color"] = self._settings.logflow_color
        if self._settings.logflow_file_path:
            file_config = transports.setdefault("file", {})
            file_config["path"] = self._settings.logflow_file_path
            file_config["enabled"] = True

        return config_data

    def _to_toml_dict(self, config: LoggingConfig) -> Dict[str, Any]:
        # TOML has no null
        return config.model_dump(mode="json", exclude_none=True)

    def save_config(self, config: Optional[LoggingConfig] = None) -> None:
        """Save configuration to the TOML config file."""
        if config is None:
            config = self.load_config()
        self.export_config(self.config_file, config)
        self._config = config

    def export_config(self, file_path: Path, config: Optional[LoggingConfig] = None) -> None:
        """Write configuration to a TOML file."""
        if config is None:
            config = self.load_config()
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(file_path, "wb") as f:
                tomli_w.dump(self._to_toml_dict(config), f)
        except PermissionError as e:
            raise ConfigurationError(
                f"Cannot write configuration file: {e}",
                f"Check write permissions for {file_path.parent}",
            )

    def reset_config(self) -> None:
        """Reset configuration to defaults."""
        self._config = LoggingConfig()
        self.save_config()
