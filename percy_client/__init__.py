"""Percy client -- async Python client for the Percy visual-testing API.

Public API
----------
.. autoclass:: PercyClient
.. autoclass:: ApiResponse
.. autoclass:: Resource
.. autoclass:: ClientConfig
.. autoclass:: Environment
.. autoclass:: UserAgent
"""

from .client import ApiResponse, PercyClient
from .config import ClientConfig
from .environment import Environment
from .errors import ApiError, PercyClientError, ResourceError
from .resource import Resource, gather_build_resources
from .user_agent import VERSION as __version__
from .user_agent import UserAgent
from .utils import base64encode, sha256hash

__all__ = [
    # Client
    "PercyClient",
    "ApiResponse",
    # Resources
    "Resource",
    "gather_build_resources",
    "sha256hash",
    "base64encode",
    # Configuration
    "ClientConfig",
    "Environment",
    "UserAgent",
    # Errors
    "PercyClientError",
    "ResourceError",
    "ApiError",
    "__version__",
]
