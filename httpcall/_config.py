import json
import os
from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import toml
from dotenv import dotenv_values

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class HTTPCallConfig:
    """
    Configuration class for the httpcall transport.

    This class holds the settings used by HTTPClient when it builds its session: request
    timeout, retry policy, TLS verification and log level. The configuration can be provided
    via input parameters, a configuration file, or environment variables.

    The priority for each field is as follows:
    1. If a parameter is passed during initialization, it is used.
    2. If no parameter is provided, it falls back to the configuration file, if any.
    3. Without a configuration file, it falls back to an environment variable.
    4. If neither is available, the documented default is used.

    Environment Variables (all optional):
    - `HTTPCALL_TIMEOUT`: Request timeout in seconds.
    - `HTTPCALL_MAX_RETRIES`: Number of transport-level retries.
    - `HTTPCALL_RETRY_BACKOFF_FACTOR`: Backoff factor between retries.
    - `HTTPCALL_VERIFY_SSL`: Whether TLS certificates are verified.
    - `HTTPCALL_LOG_LEVEL`: Log level name for the httpcall loggers.

    Parameters:
    ----------
    timeout: float, optional
        Request timeout in seconds. Defaults to 15.
    max_retries: int, optional
        Number of retries performed by the transport session. Defaults to 0 (single attempt).
    retry_backoff_factor: float, optional
        Backoff factor applied between retries. Defaults to 0.5.
    retry_status_forcelist: List[int], optional
        Status codes that trigger a retry when max_retries > 0.
    verify_ssl: bool, optional
        Whether TLS certificates are verified. Defaults to True.
    log_level: str, optional
        Log level name. Defaults to "WARNING".
    json_path: str, optional
        The path to a JSON file containing configuration settings.
    toml_path: str, optional
        The path to a TOML file containing configuration settings.
    ini_path: str, optional
        The path to an INI file containing configuration settings.
    env_path: str, optional
        The path to a .env file containing configuration settings.

    Raises:
    -------
    ValueError
        If a value cannot be parsed or is out of range.
    """

    timeout: Optional[float] = None
    max_retries: Optional[int] = None
    retry_backoff_factor: Optional[float] = None
    retry_status_forcelist: List[int] = field(default_factory=lambda: [429, 500, 502, 503, 504])
    verify_ssl: Optional[bool] = None
    log_level: str = ""
    json_path: str = field(default_factory=lambda: os.getenv("HTTPCALL_JSON_PATH", ""))
    toml_path: str = field(default_factory=lambda: os.getenv("HTTPCALL_TOML_PATH", ""))
    ini_path: str = field(default_factory=lambda: os.getenv("HTTPCALL_INI_PATH", ""))
    ini_profile: str = field(default_factory=lambda: os.getenv("HTTPCALL_INI_PROFILE", "default"))
    env_path: str = field(default_factory=lambda: os.getenv("HTTPCALL_ENV_PATH", ""))

    def __post_init__(self):
        """Resolve every field from its source and validate the result."""
        if self.json_path:
            config = self.load_config_from_file(self.json_path)
        elif self.toml_path:
            config = self.load_config_from_file(self.toml_path)
        elif self.ini_path:
            config = self.load_config_from_file(self.ini_path)
        elif self.env_path:
            config = self.load_config_from_file(self.env_path)
        else:
            config = dict(os.environ)

        if self.timeout is None:
            self.timeout = _parse_float("HTTPCALL_TIMEOUT", config.get("HTTPCALL_TIMEOUT", 15))
        if self.max_retries is None:
            self.max_retries = _parse_int("HTTPCALL_MAX_RETRIES", config.get("HTTPCALL_MAX_RETRIES", 0))
        if self.retry_backoff_factor is None:
            self.retry_backoff_factor = _parse_float(
                "HTTPCALL_RETRY_BACKOFF_FACTOR", config.get("HTTPCALL_RETRY_BACKOFF_FACTOR", 0.5)
            )
        if self.verify_ssl is None:
            self.verify_ssl = _parse_bool("HTTPCALL_VERIFY_SSL", config.get("HTTPCALL_VERIFY_SSL", True))
        self.log_level = (self.log_level or str(config.get("HTTPCALL_LOG_LEVEL", "WARNING"))).upper()

        invalid_fields = []

        if self.timeout <= 0:
            invalid_fields.append(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            invalid_fields.append(f"max_retries must not be negative, got {self.max_retries}")
        if self.retry_backoff_factor < 0:
            invalid_fields.append(f"retry_backoff_factor must not be negative, got {self.retry_backoff_factor}")

        if invalid_fields:
            raise ValueError(f"Invalid configuration: {', '.join(invalid_fields)}")

    def load_config_from_file(self, file_path: str) -> dict:
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Configuration file '{file_path}' does not exist.")

        _, ext = os.path.splitext(file_path)
        ext = ext.lower()
        if not ext and os.path.basename(file_path).startswith(".env"):
            ext = ".env"

        if ext == ".ini":
            return self.read_config_from_ini(file_path, self.ini_profile)
        if ext == ".env":
            return {key: value for key, value in dotenv_values(file_path).items() if value is not None}

        with open(file_path, "r") as f:
            if ext == ".json":
                return json.load(f)
            elif ext == ".toml":
                return toml.load(f)
            else:
                raise ValueError(f"Unsupported config file type: '{ext}'. Use .json, .toml, .ini or .env")

    @staticmethod
    def read_config_from_ini(ini_path: str, profile: str = "default") -> dict[str, str]:
        """
        Read configuration values from an INI file.

        Parameters
        ----------
        ini_path : str
            The path to the INI file.
        profile : str, optional
            The profile section name to read from. Defaults to 'default'.

        Returns
        -------
        dict
            Dictionary containing settings with upper-cased keys.

        Raises
        ------
        FileNotFoundError
            If the INI file does not exist.
        ValueError
            If the specified profile is not found in the INI file.
        """
        ini_file = Path(ini_path).expanduser().resolve()

        if not ini_file.exists():
            raise FileNotFoundError(f"INI config file not found at: {ini_file}")

        config_parser = ConfigParser()
        config_parser.read(ini_file)

        if profile not in config_parser:
            available = ", ".join(config_parser.sections()) or "no profiles"
            raise ValueError(f"Profile '{profile}' not found in INI file. Available profiles: {available}")

        return {key.upper(): value for key, value in config_parser[profile].items()}


def _parse_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
