"""Shared fixtures for bawharness tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from bawharness.client import RequestExecutor, build_executor
from bawharness.config import CONFIG_KEYS, ENV_PREFIX, HarnessConfig
from bawharness.tracker import CallStateTracker


TASK_BASE = "https://baw.test:9444"
SERVICE_BASE = "https://baw.test:9444/automationservices/rest/PR"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config dir at tmp_path and clear BAWHARNESS_* variables."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr("bawharness.config.CONFIG_DIR", config_dir)
    for key in CONFIG_KEYS:
        monkeypatch.delenv(f"{ENV_PREFIX}{key}", raising=False)
    return config_dir


@pytest.fixture
def harness_config() -> HarnessConfig:
    return HarnessConfig(
        task_base=TASK_BASE,
        service_base=SERVICE_BASE,
        user="tester",
        password="s3cret",
        csrf_token="csrf-abc",
    )


@pytest.fixture
def executor(harness_config: HarnessConfig) -> RequestExecutor:
    return build_executor(harness_config)


@pytest.fixture
def tracker(executor: RequestExecutor) -> CallStateTracker:
    return CallStateTracker(executor)
