"""
Entity-specific repositories.

Each binds MongoRepository to one document model and may add queries
specific to that entity.
"""

from docstore.repositories.customer import CustomerRepository

__all__ = ["CustomerRepository"]
