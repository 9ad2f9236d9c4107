"""
Aerospike Query Examples - Exception Classes

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

from typing import Any, Dict, Optional


# Status codes reported by the Aerospike client (as_status)
STATUS_ERR_CONNECTION = -10
STATUS_ERR_TLS = -9
STATUS_ERR_INVALID_HOST = -4
STATUS_ERR_RECORD_NOT_FOUND = 2
STATUS_ERR_TIMEOUT = 9
STATUS_ERR_CLUSTER = 11
STATUS_ERR_UDF = 100
STATUS_ERR_UDF_NOT_FOUND = 1301
STATUS_ERR_LUA_FILE_NOT_FOUND = 1302
STATUS_ERR_INDEX_FOUND = 200
STATUS_ERR_INDEX_NOT_FOUND = 201
STATUS_ERR_INDEX_OOM = 202
STATUS_ERR_INDEX_NOT_READABLE = 203
STATUS_ERR_INDEX = 204
STATUS_ERR_INDEX_NAME_MAXLEN = 205
STATUS_ERR_INDEX_MAXCOUNT = 206


class ExampleError(Exception):
    """Base exception for all example harness errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status = status

    def __str__(self) -> str:
        parts = [self.message]
        if self.error_code:
            parts.append(f"Error Code: {self.error_code}")
        if self.status is not None:
            parts.append(f"Status: {self.status}")
        return " | ".join(parts)


class ConfigurationError(ExampleError):
    """Invalid startup options or configuration file"""

    def __init__(self, message: str, **kwargs) -> None:
        super().__init__(message, error_code="CONFIG_ERROR", **kwargs)


class ClusterConnectionError(ExampleError):
    """Could not connect to (or lost) the cluster"""

    def __init__(self, message: str = "Failed to connect to cluster", **kwargs) -> None:
        super().__init__(message, error_code="CONNECTION_ERROR", **kwargs)


class UDFRegistrationError(ExampleError):
    """UDF module could not be registered"""

    def __init__(self, message: str, module: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, error_code="UDF_ERROR", **kwargs)
        self.module = module


class IndexCreationError(ExampleError):
    """Secondary index could not be created"""

    def __init__(self, message: str, index_name: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, error_code="INDEX_ERROR", **kwargs)
        self.index_name = index_name


class IndexNotFoundError(ExampleError):
    """Secondary index does not exist"""

    def __init__(self, index_name: str, **kwargs) -> None:
        message = f"Index not found: {index_name}"
        super().__init__(message, error_code="INDEX_NOT_FOUND", **kwargs)
        self.index_name = index_name


class RecordNotFoundError(ExampleError):
    """Record does not exist"""

    def __init__(self, key: Any, **kwargs) -> None:
        message = f"Record not found: {key}"
        super().__init__(message, error_code="RECORD_NOT_FOUND", **kwargs)
        self.key = key


class RecordWriteError(ExampleError):
    """Record could not be written"""

    def __init__(self, message: str, key: Any = None, **kwargs) -> None:
        super().__init__(message, error_code="WRITE_ERROR", **kwargs)
        self.key = key


class QueryError(ExampleError):
    """Query or aggregation failed"""

    def __init__(self, message: str, **kwargs) -> None:
        super().__init__(message, error_code="QUERY_ERROR", **kwargs)


class WaitTimeoutError(ExampleError):
    """Gave up waiting for a server-side task"""

    def __init__(
        self,
        message: str = "Timed out waiting for server task",
        timeout_seconds: Optional[float] = None,
        **kwargs
    ) -> None:
        super().__init__(message, error_code="WAIT_TIMEOUT", **kwargs)
        self.timeout_seconds = timeout_seconds


_CONNECTION_STATUSES = {
    STATUS_ERR_CONNECTION,
    STATUS_ERR_TLS,
    STATUS_ERR_INVALID_HOST,
    STATUS_ERR_CLUSTER,
}

_UDF_STATUSES = {
    STATUS_ERR_UDF,
    STATUS_ERR_UDF_NOT_FOUND,
    STATUS_ERR_LUA_FILE_NOT_FOUND,
}

_INDEX_STATUSES = {
    STATUS_ERR_INDEX_FOUND,
    STATUS_ERR_INDEX_OOM,
    STATUS_ERR_INDEX_NOT_READABLE,
    STATUS_ERR_INDEX,
    STATUS_ERR_INDEX_NAME_MAXLEN,
    STATUS_ERR_INDEX_MAXCOUNT,
}


def error_status(err: BaseException) -> Optional[int]:
    """Extract the numeric status from a client exception"""
    code = getattr(err, "code", None)
    if code is None and err.args and isinstance(err.args[0], int):
        code = err.args[0]
    return code


def error_message(err: BaseException) -> str:
    """Extract the message from a client exception"""
    msg = getattr(err, "msg", None)
    if msg is None and len(err.args) > 1 and isinstance(err.args[1], str):
        msg = err.args[1]
    return msg or str(err) or err.__class__.__name__


def map_aerospike_error(
    err: BaseException,
    operation: Optional[str] = None,
    target: Any = None,
) -> ExampleError:
    """Map an Aerospike client exception to the matching example error

    Args:
        err: Exception raised by the client library
        operation: Client call that failed ("connect", "put", "get", "query",
            "udf_put", "index_create", "index_remove", ...)
        target: Key, index name or module name the call was about
    """
    status = error_status(err)
    message = error_message(err)
    details = {"operation": operation} if operation else {}

    if status == STATUS_ERR_RECORD_NOT_FOUND:
        return RecordNotFoundError(target, status=status, details=details)
    elif status == STATUS_ERR_INDEX_NOT_FOUND:
        return IndexNotFoundError(str(target) if target is not None else "unknown", status=status, details=details)
    elif status == STATUS_ERR_TIMEOUT:
        return WaitTimeoutError(message, status=status, details=details)
    elif status in _CONNECTION_STATUSES:
        return ClusterConnectionError(message, status=status, details=details)
    elif status in _UDF_STATUSES:
        return UDFRegistrationError(message, module=target, status=status, details=details)
    elif status in _INDEX_STATUSES:
        return IndexCreationError(message, index_name=target, status=status, details=details)

    # Fall back to what the caller was doing
    if operation == "connect":
        return ClusterConnectionError(message, status=status, details=details)
    elif operation == "put":
        return RecordWriteError(message, key=target, status=status, details=details)
    elif operation == "query":
        return QueryError(message, status=status, details=details)
    elif operation in ("udf_put", "udf_list"):
        return UDFRegistrationError(message, module=target, status=status, details=details)
    elif operation in ("index_create", "index_wait"):
        return IndexCreationError(message, index_name=target, status=status, details=details)
    else:
        return ExampleError(message, error_code="AEROSPIKE_ERROR", details=details, status=status)
