# Infrastructure Adapters Package
from .json_store import JsonHistoryStore

__all__ = ["JsonHistoryStore"]
