from __future__ import annotations

import pytest

from feecast.api.app import create_app
from feecast.config.app_config import AppConfig
from feecast.config.fetch_config import FetchConfig
from feecast.workflows.fee_training import build_fee_runtime
from tests.conftest import FakeBlockSource


@pytest.fixture
def source(fee_chain):
    return FakeBlockSource(fee_chain)


@pytest.fixture
def runtime(source):
    cfg = AppConfig(fetch=FetchConfig(block_window=30, max_retries=0, backoff_ms=0))
    return build_fee_runtime(cfg, source=source)


@pytest.fixture
def client(runtime):
    """
    Flask test client (no real server).
    """
    app = create_app(runtime.service, runtime.trainer, runtime.inst.metrics)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
