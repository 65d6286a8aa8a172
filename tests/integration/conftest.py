"""Integration test fixtures.

Provides a fully wired and preloaded AppState backed by a mocked upstream
content host. Settings and sample sources come from tests/conftest.py.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest
import respx

from inkwell.state import AppState, build_state
from tests.conftest import HELLO_MD, RAW_BASE, README_MD, SECOND_MD, article_url

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from inkwell.config import Settings

README_URL = f"{RAW_BASE}/acme/proj/main/README.md"


@pytest.fixture()
def upstream() -> Iterator[respx.MockRouter]:
    """Mocked raw-content host. Routes are named after the slug or page id."""
    with respx.mock(assert_all_called=False) as router:
        router.get(article_url("hello"), name="hello").respond(200, text=HELLO_MD)
        router.get(article_url("second"), name="second").respond(200, text=SECOND_MD)
        router.get(README_URL, name="proj").respond(200, text=README_MD)
        yield router


@pytest.fixture()
async def app_state(settings: Settings, upstream: respx.MockRouter) -> AsyncIterator[AppState]:
    async with httpx.AsyncClient() as client:
        state = build_state(settings, client)
        await state.preload()
        yield state


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment for running the server as a child process, free of INKWELL__ overrides."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("INKWELL__")}
    env["HOME"] = str(tmp_path)
    env["XDG_CONFIG_HOME"] = str(tmp_path / "config")
    env["XDG_DATA_HOME"] = str(tmp_path / "data")
    return env
