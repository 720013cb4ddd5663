import os
import sys


# ----------------------------------------------------------------------
# 1. Environment MUST be set before any searchcore imports happen
# ----------------------------------------------------------------------

for _var in (
    "SEARCHCORE_HOST",
    "SEARCHCORE_API_KEY",
    "SEARCHCORE_TIMEOUT",
    "SEARCHCORE_TASK_INTERVAL",
    "SEARCHCORE_TASK_TIMEOUT",
    "SEARCHCORE_LOGCFG",
):
    os.environ.pop(_var, None)
os.environ.setdefault("LOG_LEVEL", "DEBUG")
sys.path.insert(0, os.path.dirname(__file__))


# ----------------------------------------------------------------------
# 2. Fake search service
# ----------------------------------------------------------------------

import httpx
import pytest

from searchcore.client import SearchClient
from searchcore.config import ClientConfig, RetryConfig

from fake_search_service import MASTER_KEY, FakeSearchService


@pytest.fixture
def service() -> FakeSearchService:
    return FakeSearchService()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        host="http://search.test",
        api_key=MASTER_KEY,
        retry=RetryConfig(max_attempts=3, base_delay=0.0, max_delay=0.0, jitter=False),
        task_interval=0.01,
        task_timeout=1.0,
    )


@pytest.fixture
def client(config, service) -> SearchClient:
    return SearchClient(config, transport=httpx.MockTransport(service))
