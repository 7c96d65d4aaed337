from .client import RemoteCache, HttpRemoteCache
from .results import ResultsRemoteCache
from .models import ArtifactCacheEntry

__all__ = [
    "RemoteCache",
    "HttpRemoteCache",
    "ResultsRemoteCache",
    "ArtifactCacheEntry",
]
