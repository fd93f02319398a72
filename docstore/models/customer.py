"""Customer document for the 'Customer' collection."""

from docstore.database import Document


class Customer(Document):
    name: str
