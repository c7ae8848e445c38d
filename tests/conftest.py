from __future__ import annotations

from typing import Iterator

import pytest

from settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch) -> Iterator[None]:
    for name in (
        "AWAIR_LISTEN_ADDRESS",
        "AWAIR_DEVICES",
        "AWAIR_REQUEST_TIMEOUT",
        "AWAIR_SCRAPE_WORKERS",
        "AWAIR_PROCESS_METRICS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
