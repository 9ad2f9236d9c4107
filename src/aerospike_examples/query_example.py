"""
Aerospike Query Examples - Query With Multiple Filters

Registers the profile UDF module, indexes the username bin, writes five
profiles, then runs a secondary index query (username = 'Mary') and an
aggregation applying profile.check_password('ghjks').

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
import sys
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from aerospike import exception as ex
from aerospike import predicates

from . import utils
from .config import ExampleConfig, get_opts
from .exceptions import ExampleError, error_message, error_status, map_aerospike_error
from .models import SAMPLE_PROFILES


logger = logging.getLogger(__name__)

UDF_MODULE = "profile"
USERNAME_INDEX_NAME = "profileindex"
USERNAME_BIN = "username"


def udf_file_path(config: ExampleConfig) -> Path:
    return Path(config.lua_user_path) / f"{UDF_MODULE}.lua"


# Query callbacks

def query_cb(value: Any) -> bool:
    """Print a record returned by a plain secondary index query"""
    # No UDF was applied, so results are (key, meta, bins) records
    if not (isinstance(value, tuple) and len(value) == 3):
        logger.info("query callback returned non-record object")
        return True

    logger.info("query callback returned record:")
    utils.dump_record(value)
    return True


def query_cb_map(value: Any) -> bool:
    """Print a value returned by the check_password aggregation"""
    # check_password maps each matching record to a map
    if not isinstance(value, dict):
        logger.info("query callback returned non-map object")
        return True

    logger.info(f"query callback returned {value}")
    return True


# Helpers

def insert_records(client: Any, config: ExampleConfig) -> bool:
    """Write the sample profiles, stopping at the first failure"""
    for profile in SAMPLE_PROFILES:
        key = profile.as_key(config.namespace, config.set_name)
        try:
            client.put(key, profile.bins())
        except ex.AerospikeError as e:
            logger.error(f"put() returned {error_status(e)} - {error_message(e)}")
            return False

    logger.info("insert succeeded")
    return True


def _run_query(query: Any, callback: Callable[[Any], bool]) -> int:
    count = 0

    def _counting(value: Any) -> bool:
        nonlocal count
        count += 1
        return callback(value)

    try:
        query.foreach(_counting)
    except ex.AerospikeError as e:
        raise map_aerospike_error(e, "query") from e

    logger.info("query is complete")
    return count


def query_by_username(
    client: Any,
    config: ExampleConfig,
    username: str,
    callback: Callable[[Any], bool] = query_cb,
) -> int:
    """select * from <ns>.<set> where username = <username>

    Returns:
        Number of results delivered to callback
    """
    query = client.query(config.namespace, config.set_name)
    query.where(predicates.equals(USERNAME_BIN, username))
    return _run_query(query, callback)


def aggregate_check_password(
    client: Any,
    config: ExampleConfig,
    password: str,
    callback: Callable[[Any], bool] = query_cb_map,
) -> int:
    """aggregate profile.check_password(<password>) on <ns>.<set>

    Returns:
        Number of results delivered to callback
    """
    query = client.query(config.namespace, config.set_name)
    query.apply(UDF_MODULE, "check_password", [password])
    return _run_query(query, callback)


def cleanup(client: Any, config: ExampleConfig) -> None:
    """Remove the example's data and index, then disconnect"""
    try:
        utils.remove_test_records(client, config)
        utils.remove_index(client, config, USERNAME_INDEX_NAME)
    except ExampleError as e:
        utils.log_error(e)
    _disconnect(client)


def _disconnect(client: Any) -> None:
    try:
        utils.cleanup(client)
    except ExampleError as e:
        utils.log_error(e)


def _abort(client: Any, config: ExampleConfig, err: ExampleError) -> int:
    utils.log_error(err)
    cleanup(client, config)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Parse command line arguments.
    try:
        config = get_opts(argv)
    except (ExampleError, OSError) as e:
        logging.basicConfig(format=utils.LOG_FORMAT)
        logger.error(f"❌ {e}")
        return 1

    utils.configure_logging(config)

    # Connect to the aerospike database cluster.
    try:
        client = utils.connect_to_aerospike(config)
    except ExampleError as e:
        utils.log_error(e)
        return 1

    # Start clean.
    try:
        utils.remove_test_records(client, config)
        utils.remove_index(client, config, USERNAME_INDEX_NAME)
    except ExampleError as e:
        logger.warning(f"⚠️ Could not remove previous test data: {e}")

    udf_file = udf_file_path(config)
    logger.info(f"register {udf_file}")

    try:
        utils.register_udf(client, config, udf_file)
    except ExampleError as e:
        utils.log_error(e)
        _disconnect(client)
        return 1

    logger.info(f"create index {USERNAME_INDEX_NAME}")

    # An index failure is reported but the run continues
    try:
        utils.create_string_index(client, config, USERNAME_BIN, USERNAME_INDEX_NAME)
        utils.wait_for_index(client, config, USERNAME_INDEX_NAME)
    except ExampleError as e:
        utils.log_error(e)

    logger.info("insert records")

    if not insert_records(client, config):
        cleanup(client, config)
        return 1

    logger.info("read records")

    if not utils.read_test_records(client, config):
        cleanup(client, config)
        return 1

    logger.info("executing query where username = Mary")

    try:
        query_by_username(client, config, "Mary")
    except ExampleError as e:
        return _abort(client, config, e)

    logger.info("executing filter query where password = ghjks")

    try:
        if aggregate_check_password(client, config, "ghjks") == 0:
            logger.info("No results returned.")
    except ExampleError as e:
        return _abort(client, config, e)

    # Cleanup and disconnect from the database cluster.
    cleanup(client, config)

    logger.info("query with multiple filters example successfully completed")
    return 0


def run() -> None:
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
