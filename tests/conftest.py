#!/usr/bin/env python3
"""
Aerospike Query Examples Test Configuration
Shared fixtures and configuration for all test modules
"""

import pytest
import logging
import sys
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

# Add the package source to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from aerospike import exception as ex

from aerospike_examples.config import ExampleConfig, TimeoutConfig
from aerospike_examples.exceptions import (
    STATUS_ERR_INDEX_NOT_FOUND,
    STATUS_ERR_RECORD_NOT_FOUND,
)


# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Test configuration
TEST_CONFIG = {
    "aerospike_host": "127.0.0.1:3000",
    "namespace": "test",
    "set_name": "pytest_profile",
}


def make_aerospike_error(code: int, msg: str = "error", cls=ex.AerospikeError) -> Exception:
    """Build a client exception the way the client library raises it"""
    err = cls(code, msg, "src/main/client.c", 1, False)
    err.code = code
    err.msg = msg
    return err


class FakeQuery:
    """In-memory stand-in for aerospike.Query"""

    def __init__(self, client: "FakeAerospikeClient", namespace: str, set_name: str):
        self.client = client
        self.namespace = namespace
        self.set_name = set_name
        self.predicate = None
        self.udf = None

    def where(self, predicate):
        self.predicate = predicate

    def apply(self, module: str, function: str, arguments: Optional[list] = None):
        self.udf = (module, function, arguments or [])

    def foreach(self, callback: Callable[[Any], Any]):
        if self.client.query_error is not None:
            raise self.client.query_error

        records = [
            record for record in self.client.records.values()
            if record[0][0] == self.namespace and record[0][1] == self.set_name
        ]
        if self.predicate is not None:
            # predicates.equals() -> (predicate, index type, bin, value, ...)
            bin_name, value = [p for p in self.predicate if isinstance(p, str)][:2]
            records = [r for r in records if r[2].get(bin_name) == value]

        if self.udf is not None:
            module, function, arguments = self.udf
            assert (module, function) == ("profile", "check_password")
            results = [
                {"username": r[2]["username"], "password": r[2]["password"]}
                for r in records if r[2].get("password") == arguments[0]
            ]
        else:
            results = records

        for result in results:
            if callback(result) is False:
                break


class FakeAerospikeClient:
    """In-memory stand-in for a connected aerospike.Client"""

    def __init__(self):
        self.records: Dict[Tuple, Tuple] = {}
        self.indexes: Dict[str, Tuple] = {}
        self.udfs: List[Dict[str, Any]] = []
        self.connected = True
        self.put_error: Optional[Exception] = None
        self.query_error: Optional[Exception] = None
        self.calls: List[str] = []

    def is_connected(self) -> bool:
        return self.connected

    def close(self):
        self.calls.append("close")
        self.connected = False

    def put(self, key, bins):
        self.calls.append("put")
        if self.put_error is not None:
            raise self.put_error
        self.records[tuple(key[:3])] = (tuple(key[:3]), {"gen": 1, "ttl": 2592000}, dict(bins))

    def get(self, key):
        try:
            return self.records[tuple(key[:3])]
        except KeyError:
            raise make_aerospike_error(STATUS_ERR_RECORD_NOT_FOUND, "AEROSPIKE_ERR_RECORD_NOT_FOUND")

    def remove(self, key):
        self.calls.append("remove")
        if self.records.pop(tuple(key[:3]), None) is None:
            raise make_aerospike_error(STATUS_ERR_RECORD_NOT_FOUND, "AEROSPIKE_ERR_RECORD_NOT_FOUND")

    def udf_put(self, filename, udf_type=0, policy=None):
        self.calls.append("udf_put")
        self.udfs.append({"name": os.path.basename(filename), "hash": "abc", "type": udf_type})

    def udf_list(self, policy=None):
        return list(self.udfs)

    def index_string_create(self, ns, set_name, bin_name, index_name, policy=None):
        self.calls.append("index_create")
        self.indexes[index_name] = (ns, set_name, bin_name)

    def index_remove(self, ns, index_name, policy=None):
        self.calls.append("index_remove")
        if self.indexes.pop(index_name, None) is None:
            raise make_aerospike_error(STATUS_ERR_INDEX_NOT_FOUND, "AEROSPIKE_ERR_INDEX_NOT_FOUND")

    def info_all(self, command, policy=None):
        index_name = command.rsplit("indexname=", 1)[-1]
        if index_name in self.indexes:
            response = f"{command}\tkeys=5;entries=5;load_pct=100;load_time=1\n"
        else:
            response = f"{command}\tFAIL:201:NO INDEX\n"
        return {"BB9020011AC4202": (None, response)}

    def query(self, namespace, set_name):
        self.calls.append("query")
        return FakeQuery(self, namespace, set_name)


@pytest.fixture
def fake_client() -> FakeAerospikeClient:
    """Connected in-memory client"""
    return FakeAerospikeClient()


@pytest.fixture
def example_config() -> ExampleConfig:
    """Example configuration with short waits"""
    return ExampleConfig(
        namespace=TEST_CONFIG["namespace"],
        set_name=TEST_CONFIG["set_name"],
        timeouts=TimeoutConfig(index_wait_s=0.2, udf_wait_s=0.2, poll_interval_s=0.01),
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo log levels set by configure_logging()"""
    yield
    logging.getLogger("aerospike_examples").setLevel(logging.NOTSET)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove AEROSPIKE_* variables so defaults apply"""
    for name in list(os.environ):
        if name.startswith("AEROSPIKE_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


# Test markers
def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--aerospike-host",
        action="store",
        default="127.0.0.1:3000",
        help="Aerospike seed node (host:port) for integration tests"
    )


@pytest.fixture(scope="session", autouse=True)
def configure_test_endpoints(request):
    """Configure test endpoints from command line options"""
    TEST_CONFIG["aerospike_host"] = request.config.getoption("--aerospike-host")


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory"""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
