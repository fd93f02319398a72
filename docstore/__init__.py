"""docstore: generic repository over MongoDB documents."""

__version__ = "0.1.0"
__author__ = "docstore Team"

__all__ = ["__version__", "__author__"]
