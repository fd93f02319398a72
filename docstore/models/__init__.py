"""Document models module."""

from docstore.models.customer import Customer

__all__ = ["Customer"]
