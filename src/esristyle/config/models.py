# src/esristyle/config/models.py
"""
Pydantic configuration models
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from esristyle.symbology.colors import METERS_PER_UNIT

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class FileLoggingConfig(BaseModel):
    """File logging configuration with template support"""

    enabled: bool = False
    path: str = "logs/esristyle_{environment}_{date}.log"  # Keep as string template
    rotation: str = "10 MB"
    retention: str = "30 days"
    compression: str = "gz"

    @field_validator("path")
    @classmethod
    def validate_path_template(cls, v: str) -> str:
        """Validate that path template has valid placeholders"""
        valid_placeholders = {"{environment}", "{date}", "{datetime}"}
        found_placeholders = set(re.findall(r"\{[^}]+\}", v))

        invalid_placeholders = found_placeholders - valid_placeholders
        if invalid_placeholders:
            raise ValueError(
                f"Invalid placeholders in path: {invalid_placeholders}. "
                f"Valid placeholders: {valid_placeholders}"
            )
        return v

    @field_validator("rotation")
    @classmethod
    def validate_rotation(cls, v: str) -> str:
        """Validate rotation format (e.g., '10 MB', '1 day')"""
        if not re.match(r"^\d+\s*(MB|GB|KB|day|days|hour|hours)$", v, re.IGNORECASE):
            raise ValueError("rotation must be in format like '10 MB', '1 GB', or '1 day'")
        return v

    def get_resolved_path(self, environment: str) -> Path:
        """
        Resolve template placeholders in the path.

        Args:
            environment: Environment name (e.g., 'development', 'production')
        """
        now = datetime.now()
        return Path(
            self.path.format(
                environment=environment,
                date=now.strftime("%Y%m%d"),
                datetime=now.strftime("%Y%m%d_%H%M%S"),
            )
        )


class ConsoleLoggingConfig(BaseModel):
    """Console logging configuration"""

    format: str = "simple"  # "simple" or "detailed"
    show_time: bool = True
    show_path: bool = False

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ["simple", "detailed"]:
            raise ValueError("format must be 'simple' or 'detailed'")
        return v


class LoggingConfig(BaseModel):
    """Complete logging configuration"""

    file: FileLoggingConfig = FileLoggingConfig()
    console: ConsoleLoggingConfig = ConsoleLoggingConfig()
    modules: Dict[str, str] = {}

    @field_validator("modules")
    @classmethod
    def validate_module_levels(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Validate that log levels are valid"""
        for module, level in v.items():
            if level.upper() not in VALID_LOG_LEVELS:
                raise ValueError(
                    f"Invalid log level '{level}' for module '{module}'. "
                    f"Valid levels: {sorted(VALID_LOG_LEVELS)}"
                )
        return {module: level.upper() for module, level in v.items()}

    def get_file_path(self, environment: str) -> Optional[Path]:
        """Resolved file path if file logging is enabled, None otherwise"""
        if self.file.enabled:
            return self.file.get_resolved_path(environment)
        return None


class ProxyConfig(BaseModel):
    """Proxy configuration for map service requests"""

    http_proxy: Optional[str] = None
    https_proxy: Optional[str] = None

    @field_validator("http_proxy", "https_proxy")
    @classmethod
    def validate_proxy_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            if not re.match(r"^https?://[^\s/$.?#].[^\s]*$", v):
                raise ValueError("Proxy URL must be a valid HTTP/HTTPS URL")
        return v

    def to_requests_format(self) -> Dict[str, str]:
        """Convert to format expected by requests library"""
        proxies = {}
        if self.http_proxy:
            proxies["http"] = self.http_proxy
        if self.https_proxy:
            proxies["https"] = self.https_proxy
        return proxies


class GlobalConfig(BaseModel):
    """Global configuration settings"""

    log_level: str = "INFO"
    logging: LoggingConfig = LoggingConfig()
    proxy: ProxyConfig = ProxyConfig()
    request_timeout: float = 30.0

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_valid(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")
        return v.upper()

    @field_validator("request_timeout")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    def get_log_file_path(self, environment: str) -> Optional[Path]:
        return self.logging.get_file_path(environment)


class StyleConfig(BaseModel):
    """Translation and style selection defaults"""

    projection_unit: str = "m"
    meters_per_unit: Optional[float] = None
    group_by_label: bool = True
    keep_leftovers: bool = False
    hidden_attribute: Optional[str] = "hidden"

    @field_validator("projection_unit")
    @classmethod
    def unit_must_be_known(cls, v: str) -> str:
        if v not in METERS_PER_UNIT:
            raise ValueError(
                f"projection_unit must be one of {sorted(METERS_PER_UNIT)}"
            )
        return v

    @field_validator("meters_per_unit")
    @classmethod
    def meters_per_unit_must_be_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("meters_per_unit must be positive")
        return v

    def resolve_meters_per_unit(self) -> float:
        """Explicit ``meters_per_unit`` wins over the projection unit"""
        if self.meters_per_unit is not None:
            return self.meters_per_unit
        return METERS_PER_UNIT[self.projection_unit]

    def translation_options(self) -> Dict[str, Any]:
        return {
            "meters_per_unit": self.resolve_meters_per_unit(),
            "group_by_label": self.group_by_label,
        }


class AppConfig(BaseModel):
    """Main application configuration"""

    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    style: StyleConfig = Field(default_factory=StyleConfig)
