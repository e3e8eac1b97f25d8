from __future__ import annotations

import pytest

from factories import FakeSessionClient, make_catalog, make_root
from pewcraft_client.api.models import GameDefinition
from pewcraft_client.core.context import RootContext


@pytest.fixture()
def catalog() -> GameDefinition:
    return make_catalog()


@pytest.fixture()
def fake_client() -> FakeSessionClient:
    return FakeSessionClient()


@pytest.fixture()
def root(fake_client: FakeSessionClient) -> RootContext:
    return make_root(fake_client)
