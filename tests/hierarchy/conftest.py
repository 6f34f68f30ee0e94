import os

import pytest


@pytest.fixture(scope="session")
def _hierarchy_domain(request):
    """Initialize the hierarchy domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from hierarchy.domain import hierarchy

    hierarchy.init()
    return hierarchy


@pytest.fixture(scope="session", autouse=True)
def setup_db(_hierarchy_domain):
    from hierarchy.utils.db import drop_db, setup_db

    setup_db(_hierarchy_domain)

    yield

    drop_db(_hierarchy_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_hierarchy_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _hierarchy_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()
