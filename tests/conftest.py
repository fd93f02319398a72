"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
from mongomock_motor import AsyncMongoMockClient

from docstore.database import MongoContext
from docstore.repositories import CustomerRepository

CONNECTION_STRING = "mongodb://localhost/Database"


@pytest.fixture
def mongo_client() -> AsyncMongoMockClient:
    """Return an in-memory Motor-compatible client."""
    return AsyncMongoMockClient()


@pytest.fixture
def context(mongo_client: AsyncMongoMockClient) -> MongoContext:
    """Return a MongoContext bound to the in-memory 'Database'."""
    return MongoContext(CONNECTION_STRING, client=mongo_client)


@pytest.fixture
def customer_repository(context: MongoContext) -> CustomerRepository:
    return CustomerRepository(context)
