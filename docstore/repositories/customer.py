"""
CustomerRepository

MongoDB operations for the 'Customer' collection.

Specialized Methods:
- find_by_name(name): All customers with an exact name
"""

from docstore.database import MongoRepository, field
from docstore.models.customer import Customer


class CustomerRepository(MongoRepository[Customer]):
    document_model = Customer

    async def find_by_name(self, name: str) -> list[Customer]:
        return await self.list(field("name") == name).to_list()
