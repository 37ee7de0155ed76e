from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pointclimate.core.config import Settings
from pointclimate.factory import create_app
from tests.fakes import FakePowerClient


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        log_level="DEBUG",
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        power_timeout_seconds=1.0,
        power_retry_attempts=1,
        power_retry_max_wait_seconds=0.0,
        resolver_max_attempts=24,
        area_batch_size=10,
    )


@pytest.fixture()
def fake_power() -> FakePowerClient:
    return FakePowerClient.always_valid()


@pytest.fixture()
def client(settings: Settings, fake_power: FakePowerClient) -> TestClient:
    app = create_app(settings, gateway=fake_power)
    with TestClient(app) as client:
        yield client
