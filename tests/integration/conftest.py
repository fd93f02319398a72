"""Integration test fixtures: a real MongoDB on localhost."""

from __future__ import annotations

import socket
import time
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio

from docstore.database import MongoContext
from docstore.repositories import CustomerRepository


def _tcp_reachable(
    host: str,
    port: int,
    timeout: float = 1.0,
    retries: int = 3,
    delay: float = 1.0,
) -> bool:
    """Check if a TCP service is reachable, retrying on failure."""
    for attempt in range(retries):
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            if attempt < retries - 1:
                time.sleep(delay)
    return False


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    integration = [item for item in items if "integration" in item.keywords]
    if not integration or _tcp_reachable("localhost", 27017, retries=1):
        return
    skip = pytest.mark.skip(reason="MongoDB not reachable on localhost:27017")
    for item in integration:
        item.add_marker(skip)


@pytest_asyncio.fixture
async def mongo_context() -> AsyncGenerator[MongoContext, None]:
    """Context on a throwaway database, dropped afterwards."""
    context = MongoContext(
        f"mongodb://localhost:27017/docstore_test_{uuid4().hex[:8]}",
        serverSelectionTimeoutMS=2000,
    )
    try:
        yield context
    finally:
        await context.client.drop_database(context.database_name)
        context.close()


@pytest.fixture
def live_customers(mongo_context: MongoContext) -> CustomerRepository:
    return CustomerRepository(mongo_context)
