"""
Aerospike Query Examples

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

from .config import ExampleConfig, TimeoutConfig, LogLevel, get_opts, load_config
from .models import ProfileRecord, SAMPLE_PROFILES, sample_keys
from .exceptions import (
    ExampleError,
    ConfigurationError,
    ClusterConnectionError,
    UDFRegistrationError,
    IndexCreationError,
    IndexNotFoundError,
    RecordNotFoundError,
    RecordWriteError,
    QueryError,
    WaitTimeoutError,
    map_aerospike_error,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "ExampleConfig",
    "TimeoutConfig",
    "LogLevel",
    "get_opts",
    "load_config",

    # Models
    "ProfileRecord",
    "SAMPLE_PROFILES",
    "sample_keys",

    # Exceptions
    "ExampleError",
    "ConfigurationError",
    "ClusterConnectionError",
    "UDFRegistrationError",
    "IndexCreationError",
    "IndexNotFoundError",
    "RecordNotFoundError",
    "RecordWriteError",
    "QueryError",
    "WaitTimeoutError",
    "map_aerospike_error",
]
