"""Fixtures for tests that run against a real Twisp container."""

from __future__ import annotations

import os

import pytest
import pytest_asyncio

from adapters.twisp_container import TwispOption, start_twisp, with_log_sink
from core.interfaces.log_sink import LoggerSink


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("TWISP_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set TWISP_INTEGRATION=1 to run against the Twisp container")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest_asyncio.fixture
async def twisp():
    options: list[TwispOption] = []
    if os.environ.get("TWISP_LOGS") == "1":
        options.append(with_log_sink(LoggerSink()))

    instance = await start_twisp(*options)
    try:
        yield instance
    finally:
        await instance.cleanup()
