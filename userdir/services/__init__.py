"""Directory services: validation, storage, caching, policy and the façade"""

from .directory_service import DirectoryService
from .policy import Operation, authorize
from .read_cache import ReadCache
from .user_store import UserStore

__all__ = [
    "DirectoryService",
    "Operation",
    "ReadCache",
    "UserStore",
    "authorize",
]
