"""Python client for the Linkup search API."""

from .api import (
    AnswerSource,
    BalanceResponse,
    Depth,
    FetchRequest,
    LinkupClient,
    OutputType,
    RawResponse,
    SearchRequest,
    SourcedAnswer,
)
from .config import ClientConfig, load_config
from .errors import (
    APIError,
    CancellationError,
    ConfigurationError,
    DecodeError,
    ForbiddenError,
    HTTPStatusError,
    LinkupError,
    StatusError,
    TransportError,
    UnauthorizedError,
)
from .transport import Deadline, RetryPolicy

__version__ = "0.1.0"

__all__ = [
    "AnswerSource",
    "BalanceResponse",
    "Depth",
    "FetchRequest",
    "LinkupClient",
    "OutputType",
    "RawResponse",
    "SearchRequest",
    "SourcedAnswer",
    "ClientConfig",
    "load_config",
    "APIError",
    "CancellationError",
    "ConfigurationError",
    "DecodeError",
    "ForbiddenError",
    "HTTPStatusError",
    "LinkupError",
    "StatusError",
    "TransportError",
    "UnauthorizedError",
    "Deadline",
    "RetryPolicy",
]
