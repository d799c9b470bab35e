from typing import Any, List, Set, Tuple

import httpx
import numpy as np
import pytest

from sast.charts import ChartConfig
from sast.config import Settings
from sast.state_store import ClientStateStore

API_ROOT = "http://testserver/api"


class RecordingBackend:
    """Chart backend that records every construct/destroy call."""

    def __init__(self, mounted=()):
        self.mounts: Set[str] = set(mounted)
        self.constructed: List[Tuple[str, ChartConfig]] = []
        self.destroyed: List[Tuple[str, Any]] = []

    def mount(self, *chart_ids: str) -> None:
        self.mounts.update(chart_ids)

    def has_mount(self, chart_id: str) -> bool:
        return chart_id in self.mounts

    def construct(self, chart_id: str, config: ChartConfig):
        self.constructed.append((chart_id, config))
        return {"id": chart_id, "config": config, "n": len(self.constructed)}

    def destroy(self, chart_id: str, instance) -> None:
        self.destroyed.append((chart_id, instance))

    def constructs_for(self, chart_id: str) -> int:
        return sum(1 for cid, _ in self.constructed if cid == chart_id)

    def destroys_for(self, chart_id: str) -> int:
        return sum(1 for cid, _ in self.destroyed if cid == chart_id)


class CallCounter:
    """httpx.MockTransport handler wrapper counting requests."""

    def __init__(self, handler):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def calls(self) -> int:
        return len(self.requests)


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def store():
    return ClientStateStore()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_base_url=API_ROOT,
        database_path=tmp_path / "auth.sqlite",
    )


@pytest.fixture
def offline_counter():
    return CallCounter(unreachable)
