"""API module - Linkup endpoints and payload models."""

from .client import LinkupClient
from .schema import (
    AnswerSource,
    BalanceResponse,
    Depth,
    FetchRequest,
    OutputType,
    RawResponse,
    SearchRequest,
    SourcedAnswer,
)

__all__ = [
    "LinkupClient",
    "AnswerSource",
    "BalanceResponse",
    "Depth",
    "FetchRequest",
    "OutputType",
    "RawResponse",
    "SearchRequest",
    "SourcedAnswer",
]
