"""Transport module - HTTP communication and retries."""

from .deadline import Deadline
from .executor import (
    MAX_ERROR_BODY,
    Outcome,
    OutcomeKind,
    RequestExecutor,
    decode_api_error,
    parse_retry_after,
)
from .http_client import (
    BytesBody,
    RequestsTransport,
    ResponseBody,
    Transport,
    TransportResponse,
)
from .retry_policy import (
    RetryPolicy,
    aggressive_retry_policy,
    backoff,
    default_retry_policy,
    no_retry_policy,
)

__all__ = [
    "Deadline",
    "MAX_ERROR_BODY",
    "Outcome",
    "OutcomeKind",
    "RequestExecutor",
    "decode_api_error",
    "parse_retry_after",
    "BytesBody",
    "RequestsTransport",
    "ResponseBody",
    "Transport",
    "TransportResponse",
    "RetryPolicy",
    "aggressive_retry_policy",
    "backoff",
    "default_retry_policy",
    "no_retry_policy",
]
