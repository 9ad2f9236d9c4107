"""
Aerospike Query Examples - Example Harness

Shared helpers used by the examples: logging setup, connecting, removing
test data and indexes, registering UDF modules, waiting for server-side
tasks and printing records.

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

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import aerospike
from aerospike import exception as ex
from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_fixed

from .config import ExampleConfig
from .exceptions import (
    STATUS_ERR_INDEX_NOT_FOUND,
    STATUS_ERR_RECORD_NOT_FOUND,
    ExampleError,
    UDFRegistrationError,
    WaitTimeoutError,
    error_message,
    error_status,
    map_aerospike_error,
)
from .models import KeyTuple, sample_keys


logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "aerospike_examples"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

_CLIENT_LOG_LEVELS = {
    0: logging.ERROR,
    1: logging.WARNING,
    2: logging.INFO,
    3: logging.DEBUG,
    4: logging.DEBUG,
}


def configure_logging(config: ExampleConfig) -> None:
    """Setup logging configuration"""
    if config.enable_debug_logging:
        level = logging.DEBUG
    else:
        level = getattr(logging, getattr(config.log_level, "value", config.log_level))

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    if config.enable_debug_logging:
        # Route the client library's own log into ours
        aerospike.set_log_level(aerospike.LOG_LEVEL_DEBUG)
        aerospike.set_log_handler(_client_log_handler)


def _client_log_handler(level: int, func: str, path: str, line: int, msg: str) -> None:
    logging.getLogger(f"{PACKAGE_LOGGER}.client").log(
        _CLIENT_LOG_LEVELS.get(level, logging.DEBUG), f"[{func}:{line}] {msg}"
    )


def connect_to_aerospike(config: ExampleConfig) -> Any:
    """Connect to the cluster described by config

    Returns:
        A connected aerospike client

    Raises:
        ClusterConnectionError: the cluster could not be reached
    """
    logger.debug(f"Connecting to {config.describe()}")
    try:
        client = aerospike.client(config.client_config())
        if config.user:
            client.connect(config.user, config.password or "")
        else:
            client.connect()
    except ex.AerospikeError as e:
        raise map_aerospike_error(e, "connect") from e

    logger.info(f"✅ Connected to Aerospike ({config.describe()})")
    return client


def remove_test_records(client: Any, config: ExampleConfig, keys: Optional[Sequence[KeyTuple]] = None) -> None:
    """Remove the example's records, ignoring ones that do not exist"""
    if keys is None:
        keys = sample_keys(config.namespace, config.set_name)

    for key in keys:
        try:
            client.remove(key)
        except ex.AerospikeError as e:
            if error_status(e) == STATUS_ERR_RECORD_NOT_FOUND:
                continue
            raise map_aerospike_error(e, "remove", key) from e


def remove_index(client: Any, config: ExampleConfig, index_name: str) -> None:
    """Remove a secondary index, ignoring one that does not exist"""
    try:
        client.index_remove(config.namespace, index_name)
    except ex.AerospikeError as e:
        if error_status(e) == STATUS_ERR_INDEX_NOT_FOUND:
            logger.debug(f"Index {index_name} not present")
            return
        raise map_aerospike_error(e, "index_remove", index_name) from e


def poll_until(
    check: Callable[[], bool],
    timeout: float,
    interval: float,
    description: str,
) -> None:
    """Call check until it returns True or timeout seconds have passed

    Raises:
        WaitTimeoutError: check never returned True
    """
    retrying = Retrying(
        stop=stop_after_delay(timeout),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda ready: not ready),
    )
    try:
        retrying(check)
    except RetryError as e:
        raise WaitTimeoutError(
            f"Timed out after {timeout}s waiting for {description}",
            timeout_seconds=timeout,
        ) from e


def register_udf(client: Any, config: ExampleConfig, udf_file: Union[str, Path]) -> None:
    """Register a Lua module and wait until the cluster lists it

    Raises:
        UDFRegistrationError: the file is missing or registration failed
        WaitTimeoutError: the module never became visible
    """
    path = Path(udf_file)
    if not path.is_file():
        raise UDFRegistrationError(f"UDF file not found: {path}", module=path.name)

    try:
        client.udf_put(str(path), aerospike.UDF_TYPE_LUA)
    except ex.AerospikeError as e:
        raise map_aerospike_error(e, "udf_put", path.name) from e

    def _registered() -> bool:
        try:
            modules = client.udf_list()
        except ex.AerospikeError as e:
            raise map_aerospike_error(e, "udf_list", path.name) from e
        return any(module.get("name") == path.name for module in modules or [])

    poll_until(
        _registered,
        config.timeouts.udf_wait_s,
        config.timeouts.poll_interval_s,
        f"UDF module {path.name}",
    )
    logger.debug(f"UDF module {path.name} registered")


def create_string_index(client: Any, config: ExampleConfig, bin_name: str, index_name: str) -> None:
    """Issue a string secondary index create on bin_name"""
    try:
        client.index_string_create(config.namespace, config.set_name, bin_name, index_name)
    except ex.AerospikeError as e:
        raise map_aerospike_error(e, "index_create", index_name) from e


def info_parts(response: str) -> List[List[str]]:
    """Split an info response into ';' separated groups of ':' separated parts"""
    return [group.split(":") for group in response.strip().split(";") if group]


def parse_info_body(response: Optional[str]) -> str:
    """Strip the echoed request (everything before a tab) from an info response"""
    return response.strip().split("\t")[-1] if response else ""


def parse_info(response: Optional[str]) -> Dict[str, str]:
    """Parse the name=value pairs of an info response"""
    values = {}
    for item in parse_info_body(response).split(";"):
        name, sep, value = item.partition("=")
        if sep:
            values[name.strip()] = value.strip()
    return values


def print_info(title: str, response: str) -> None:
    logger.info(title)
    for group in info_parts(response):
        for part in group:
            logger.info(f"\t{part}")


def _index_ready(stats: Dict[str, str]) -> bool:
    if "load_pct" in stats:
        return stats["load_pct"] == "100"
    # Servers before 6.0 report a state instead of a load percentage
    return stats.get("state") == "RW"


def wait_for_index(client: Any, config: ExampleConfig, index_name: str) -> None:
    """Wait until every node reports the index fully built

    Raises:
        WaitTimeoutError: the index was not ready within the configured wait
    """
    command = f"sindex-stat:namespace={config.namespace};indexname={index_name}"

    def _ready() -> bool:
        try:
            responses = client.info_all(command)
        except ex.AerospikeError as e:
            raise map_aerospike_error(e, "index_wait", index_name) from e

        if not responses:
            return False

        for node, (err, response) in responses.items():
            if err is not None:
                logger.debug(f"Node {node} index status error: {err}")
                return False
            if not _index_ready(parse_info(response)):
                return False
        return True

    poll_until(
        _ready,
        config.timeouts.index_wait_s,
        config.timeouts.poll_interval_s,
        f"index {index_name}",
    )

    if logger.isEnabledFor(logging.DEBUG):
        for node, (_, response) in client.info_all(command).items():
            print_info(f"index {index_name} on {node}:", parse_info_body(response))


def read_test_records(client: Any, config: ExampleConfig, keys: Optional[Sequence[KeyTuple]] = None) -> bool:
    """Read back and print the example's records"""
    if keys is None:
        keys = sample_keys(config.namespace, config.set_name)

    for key in keys:
        try:
            record = client.get(key)
        except ex.AerospikeError as e:
            logger.error(f"get() returned {error_status(e)} - {error_message(e)}")
            return False

        logger.info(f"get succeeded for key {key[2]}:")
        dump_record(record)

    return True


def dump_record(record: Optional[tuple]) -> None:
    """Log the key, metadata and bins of a (key, meta, bins) record"""
    if record is None:
        logger.info("  null record")
        return

    key, meta, bins = record
    meta = meta or {}
    bins = bins or {}

    if key:
        logger.info(f"  key: ns={key[0]} set={key[1]} pk={key[2] if len(key) > 2 else None}")
    logger.info(
        f"  gen {meta.get('gen')}, ttl {meta.get('ttl')}, "
        f"{len(bins)} bin{'' if len(bins) == 1 else 's'}"
    )
    for name, value in bins.items():
        logger.info(f"  {name} : {value!r}")


def cleanup(client: Any) -> None:
    """Close the client connection"""
    if client is None:
        return
    try:
        if client.is_connected():
            client.close()
    except ex.AerospikeError as e:
        raise map_aerospike_error(e, "close") from e


def log_error(err: ExampleError) -> None:
    """Log an example error in the harness' error(code): message form"""
    logger.error(f"error({err.status}): {err.message}")
