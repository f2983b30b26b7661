from collections.abc import AsyncIterator, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.services.data_url import ImagePayload


class FakeBackend:
    def __init__(self, name: str, outcome: str | Exception) -> None:
        self.name = name
        self.outcome = outcome
        self.calls: list[tuple[ImagePayload, str, str]] = []

    async def attempt(self, image: ImagePayload, data_url: str, credential: str) -> str:
        self.calls.append((image, data_url, credential))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def make_backend() -> Callable[[str, str | Exception], FakeBackend]:
    return FakeBackend


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
