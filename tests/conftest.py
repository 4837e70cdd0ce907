from __future__ import annotations

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from top20.api import create_app
from top20.config import Settings
from top20.persistence import SubmissionStore, build_engine


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store(tmp_path: Path):
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'top20.sqlite'}")
    engine = build_engine(settings)
    submission_store = SubmissionStore(engine)
    submission_store.ensure_schema()
    yield submission_store
    engine.dispose()


@pytest.fixture
async def client(store: SubmissionStore):
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client

