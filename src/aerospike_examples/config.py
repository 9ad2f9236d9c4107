"""
Aerospike Query Examples - Configuration

Copyright 2025 Aerospike Query Examples contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import argparse
import getpass
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_NAMESPACE = "test"
DEFAULT_SET = "profile"

# Directory holding the packaged Lua modules
UDF_DIR = Path(__file__).parent / "udf"

_PASSWORD_PROMPT = object()


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TimeoutConfig(BaseModel):
    """Client timeouts and server task wait limits"""
    connect_ms: int = Field(default=1000, ge=1, description="Cluster connect timeout")
    total_ms: int = Field(default=1000, ge=0, description="Per-transaction total timeout (0 = none)")
    index_wait_s: float = Field(default=30.0, gt=0, le=3600.0)
    udf_wait_s: float = Field(default=10.0, gt=0, le=3600.0)
    poll_interval_s: float = Field(default=0.5, gt=0, le=60.0)


def parse_host(value: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Parse "host" or "host:port" into a (host, port) tuple"""
    value = value.strip()
    if not value:
        raise ValueError("Host cannot be empty")

    if value.count(":") == 1:
        host, port = value.split(":")
        return host, int(port)
    return value, default_port


class ExampleConfig(BaseModel):
    """Complete example configuration"""

    # Cluster
    hosts: List[Tuple[str, int]] = Field(
        default_factory=lambda: [(DEFAULT_HOST, DEFAULT_PORT)],
        description="Seed nodes",
    )
    user: Optional[str] = Field(default=None, description="User name for secured clusters")
    password: Optional[str] = Field(default=None, description="Password for secured clusters")

    # Data location
    namespace: str = Field(default=DEFAULT_NAMESPACE)
    set_name: str = Field(default=DEFAULT_SET)

    # UDF modules
    lua_user_path: str = Field(default=str(UDF_DIR), description="Directory of Lua modules for aggregation")

    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO)
    enable_debug_logging: bool = False

    model_config = ConfigDict(use_enum_values=True)

    @field_validator('hosts', mode='before')
    def validate_hosts(cls, v: Any) -> List[Tuple[str, int]]:
        """Accept "host", "host:port", [host, port] or (host, port) entries"""
        if isinstance(v, str):
            v = [item for item in v.split(",") if item.strip()]
        if not v:
            raise ValueError("At least one host is required")

        hosts = []
        for item in v:
            if isinstance(item, str):
                host, port = parse_host(item)
            else:
                host, port = item[0], int(item[1])
            if not host:
                raise ValueError("Host cannot be empty")
            if not 0 < port < 65536:
                raise ValueError(f"Port out of range: {port}")
            hosts.append((host, port))
        return hosts

    @field_validator('namespace', 'set_name')
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Namespace and set names cannot be empty")
        return v

    @classmethod
    def from_env(cls, **overrides) -> "ExampleConfig":
        """Create configuration from environment variables"""
        config_dict: Dict[str, Any] = {}

        # Cluster settings
        port = int(os.getenv("AEROSPIKE_PORT", DEFAULT_PORT))
        if host := os.getenv("AEROSPIKE_HOST"):
            config_dict["hosts"] = [parse_host(h, port) for h in host.split(",") if h.strip()]
        elif "AEROSPIKE_PORT" in os.environ:
            config_dict["hosts"] = [(DEFAULT_HOST, port)]
        if user := os.getenv("AEROSPIKE_USER"):
            config_dict["user"] = user
        if password := os.getenv("AEROSPIKE_PASSWORD"):
            config_dict["password"] = password

        # Data location
        if namespace := os.getenv("AEROSPIKE_NAMESPACE"):
            config_dict["namespace"] = namespace
        if set_name := os.getenv("AEROSPIKE_SET"):
            config_dict["set_name"] = set_name
        if lua_path := os.getenv("AEROSPIKE_LUA_USER_PATH"):
            config_dict["lua_user_path"] = lua_path

        # Wait limits
        if index_wait := os.getenv("AEROSPIKE_INDEX_WAIT"):
            config_dict["timeouts"] = {"index_wait_s": float(index_wait)}

        # Logging
        if log_level := os.getenv("AEROSPIKE_LOG_LEVEL"):
            config_dict["log_level"] = log_level.upper()
        if debug := os.getenv("AEROSPIKE_DEBUG"):
            config_dict["enable_debug_logging"] = debug.lower() in ("true", "1", "yes")

        # Nested sections merge rather than replace
        if "timeouts" in config_dict and isinstance(overrides.get("timeouts"), dict):
            overrides = dict(overrides, timeouts={**config_dict["timeouts"], **overrides["timeouts"]})

        config_dict.update(overrides)

        return cls(**config_dict)

    def client_config(self) -> Dict[str, Any]:
        """Configuration dictionary for aerospike.client()"""
        total = self.timeouts.total_ms
        return {
            "hosts": list(self.hosts),
            "connect_timeout": self.timeouts.connect_ms,
            "policies": {
                "read": {"total_timeout": total},
                "write": {"total_timeout": total},
                "query": {"total_timeout": 0},
            },
            "lua": {"user_path": self.lua_user_path},
        }

    def describe(self) -> str:
        """One-line summary safe for logs (no credentials)"""
        hosts = ",".join(f"{host}:{port}" for host, port in self.hosts)
        return f"hosts={hosts} namespace={self.namespace} set={self.set_name}"


def load_config(config_file: Optional[str] = None, **kwargs) -> ExampleConfig:
    """Load configuration from multiple sources with precedence:
    1. Explicit parameters
    2. Configuration file
    3. Environment variables
    4. Defaults
    """
    config_dict: Dict[str, Any] = {}

    if config_file:
        file_config = load_config_file(config_file)
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")
        config_dict.update(file_config)

    explicit = {k: v for k, v in kwargs.items() if v is not None}
    if isinstance(config_dict.get("timeouts"), dict) and isinstance(explicit.get("timeouts"), dict):
        explicit["timeouts"] = {**config_dict["timeouts"], **explicit["timeouts"]}
    config_dict.update(explicit)

    try:
        return ExampleConfig.from_env(**config_dict)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config_file(file_path: str) -> dict:
    """Load configuration from file (JSON, YAML, or TOML)

    Raises:
        FileNotFoundError: the file does not exist
        ConfigurationError: the file cannot be parsed, or the parser for its
            format is not installed
    """
    import json

    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    content = path.read_text()

    if file_path.endswith(('.yml', '.yaml')):
        try:
            import yaml
        except ImportError as e:
            raise ConfigurationError("PyYAML is required to load YAML configuration files") from e
        try:
            return yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e

    elif file_path.endswith('.toml'):
        try:
            import tomli
        except ImportError as e:
            raise ConfigurationError("tomli is required to load TOML configuration files") from e
        try:
            return tomli.loads(content)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {file_path}: {e}") from e

    else:  # JSON
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {file_path}: {e}") from e


class OptionParser(argparse.ArgumentParser):
    """Argument parser that raises ConfigurationError instead of exiting"""

    def error(self, message: str) -> None:
        raise ConfigurationError(f"Invalid option: {message}")


def build_parser() -> argparse.ArgumentParser:
    """Command line options shared by the examples"""
    # -h is the host option, so help is --help only
    parser = OptionParser(
        description="Secondary index query and UDF aggregation example",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", "--host", help=f"Server address [default: {DEFAULT_HOST}]")
    parser.add_argument("-p", "--port", type=int, help=f"Server port [default: {DEFAULT_PORT}]")
    parser.add_argument("-U", "--user", help="User name")
    parser.add_argument(
        "-P", "--password", nargs="?", const=_PASSWORD_PROMPT,
        help="Password (prompted for when given without a value)",
    )
    parser.add_argument("-n", "--namespace", help=f"Namespace [default: {DEFAULT_NAMESPACE}]")
    parser.add_argument("-s", "--set", dest="set_name", help=f"Set name [default: {DEFAULT_SET}]")
    parser.add_argument("--udf-path", dest="lua_user_path", help="Directory of Lua UDF modules")
    parser.add_argument("--config", dest="config_file", help="JSON, YAML or TOML configuration file")
    parser.add_argument(
        "--log-level", choices=[level.value for level in LogLevel],
        type=str.upper, help="Log level [default: INFO]",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Enable client debug logging")
    parser.add_argument("--index-wait", type=float, help="Seconds to wait for the index to become queryable")
    return parser


def get_opts(argv: Optional[Sequence[str]] = None) -> ExampleConfig:
    """Parse command line options into an ExampleConfig"""
    args = build_parser().parse_args(argv)

    overrides: Dict[str, Any] = {
        "user": args.user,
        "namespace": args.namespace,
        "set_name": args.set_name,
        "lua_user_path": args.lua_user_path,
        "log_level": args.log_level,
        "enable_debug_logging": args.debug,
    }

    if args.host or args.port:
        host = args.host or os.getenv("AEROSPIKE_HOST", DEFAULT_HOST).split(",")[0]
        try:
            port = args.port or int(os.getenv("AEROSPIKE_PORT", DEFAULT_PORT))
            host, parsed_port = parse_host(host, port)
        except ValueError as e:
            raise ConfigurationError(f"Invalid host or port: {e}") from e
        overrides["hosts"] = [(host, args.port or parsed_port)]

    if args.password is _PASSWORD_PROMPT:
        overrides["password"] = getpass.getpass("Enter Password: ")
    else:
        overrides["password"] = args.password

    if args.index_wait is not None:
        overrides["timeouts"] = {"index_wait_s": args.index_wait}

    return load_config(config_file=args.config_file, **overrides)
