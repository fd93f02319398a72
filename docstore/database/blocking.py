"""
Blocking access to a MongoRepository for synchronous callers (scripts,
worker tasks).

Every repository coroutine is run to completion on a private event loop
that lives as long as the facade, so the Motor client stays bound to a
single loop across calls.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Generic

from .repository import DocumentQuery, MongoRepository, TDocument


class BlockingRepository(Generic[TDocument]):
    """
    Usage:
        with BlockingRepository(CustomerRepository(context)) as customers:
            customers.add(Customer(name="A"))
            everyone = customers.list()
    """

    def __init__(self, repository: MongoRepository[TDocument]):
        self.repository = repository
        self._runner = asyncio.Runner()

    def __enter__(self) -> BlockingRepository[TDocument]:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._runner.close()

    def run(self, coro: Any) -> Any:
        """Run a coroutine, or collect a query, on this facade's loop."""
        if isinstance(coro, DocumentQuery):
            coro = coro.to_list()
        return self._runner.run(coro)

    def __getattr__(self, name: str) -> Any:
        if name in ("repository", "_runner"):
            raise AttributeError(name)
        attr = getattr(self.repository, name)
        if name.startswith("_") or not inspect.ismethod(attr):
            return attr

        @functools.wraps(attr)
        def call(*args: Any, **kwargs: Any) -> Any:
            result = attr(*args, **kwargs)
            if inspect.iscoroutine(result) or isinstance(result, DocumentQuery):
                return self.run(result)
            return result

        return call
