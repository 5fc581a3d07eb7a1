"""Request and response models for the Linkup API.

Requests render to the camelCase JSON bodies the API expects. Responses
keep the raw bytes; decoding into a typed shape is a separate step.
"""

import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar, Union

from ..errors import ConfigurationError, DecodeError

T = TypeVar("T")


class Depth(str, Enum):
    """Search depth."""
    STANDARD = "standard"
    DEEP = "deep"


class OutputType(str, Enum):
    """Desired shape of the search output."""
    SOURCED_ANSWER = "sourcedAnswer"
    SEARCH_RESULTS = "searchResults"
    STRUCTURED = "structured"


VALID_DEPTHS = {e.value for e in Depth}
VALID_OUTPUT_TYPES = {e.value for e in OutputType}

DATE_FORMAT = "%Y-%m-%d"


def _coerce_enum(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(e.value for e in enum_cls)
        raise ConfigurationError(
            f"linkup: invalid {name} {value!r} (expected one of: {valid})"
        ) from None


def _check_date(value: str, name: str) -> None:
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ConfigurationError(
            f"linkup: {name} must be YYYY-MM-DD, got {value!r}"
        ) from None


@dataclass
class SearchRequest:
    """Body of POST /search."""
    q: str
    depth: Union[Depth, str] = Depth.STANDARD
    output_type: Union[OutputType, str] = OutputType.SEARCH_RESULTS
    include_images: bool = False
    from_date: str = ""
    to_date: str = ""
    exclude_domains: list[str] = field(default_factory=list)
    include_domains: list[str] = field(default_factory=list)
    include_inline_citations: bool = False
    structured_output_schema: Optional[str] = None
    include_sources: bool = False

    def __post_init__(self):
        self.depth = _coerce_enum(Depth, self.depth, "depth")
        self.output_type = _coerce_enum(OutputType, self.output_type, "output type")

    def validate(self) -> None:
        """Check fields the API would reject.

        Raises:
            ConfigurationError: On a malformed field.
        """
        if self.from_date:
            _check_date(self.from_date, "from_date")
        if self.to_date:
            _check_date(self.to_date, "to_date")
        if self.output_type == OutputType.STRUCTURED and not self.structured_output_schema:
            raise ConfigurationError(
                "linkup: structured output requires structured_output_schema"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body, omitting unset optional fields."""
        data: dict[str, Any] = {
            "q": self.q,
            "depth": self.depth.value,
            "outputType": self.output_type.value,
        }
        optional = {
            "includeImages": self.include_images,
            "fromDate": self.from_date,
            "toDate": self.to_date,
            "excludeDomains": self.exclude_domains,
            "includeDomains": self.include_domains,
            "includeInlineCitations": self.include_inline_citations,
            "includeSources": self.include_sources,
        }
        data.update({k: v for k, v in optional.items() if v})
        if self.structured_output_schema is not None:
            data["structuredOutputSchema"] = self.structured_output_schema
        return data


@dataclass
class FetchRequest:
    """Body of POST /fetch."""
    url: str
    include_raw_html: bool = False
    render_js: bool = False
    extract_images: bool = False

    def validate(self) -> None:
        if not self.url:
            raise ConfigurationError("linkup: fetch url is empty")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url}
        optional = {
            "includeRawHtml": self.include_raw_html,
            "renderJs": self.render_js,
            "extractImages": self.extract_images,
        }
        data.update({k: v for k, v in optional.items() if v})
        return data


@dataclass
class RawResponse:
    """Exact JSON bytes returned by the API."""
    raw: bytes

    def raw_json(self) -> bytes:
        return self.raw

    def json(self) -> Any:
        """Parse the payload as plain JSON."""
        return self.decode_into(object)

    def decode_into(self, shape: Type[T]) -> T:
        """Decode the payload into ``shape``.

        ``shape`` may be a dataclass (unknown keys are ignored), a class
        with a ``from_dict`` classmethod, ``dict``/``list`` (type-checked
        plain JSON), ``object`` (plain JSON, unchecked), or any callable
        taking the decoded value.

        Raises:
            DecodeError: If the bytes are not JSON or do not fit the shape.
        """
        try:
            data = json.loads(self.raw)
        except ValueError as e:
            raise DecodeError(f"linkup: decoding response: {e}") from e

        try:
            return _build(shape, data)
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeError(
                f"linkup: decoding response into {getattr(shape, '__name__', shape)}: {e}"
            ) from e


def _build(shape, data):
    if shape is object:
        return data
    if shape in (dict, list):
        if not isinstance(data, shape):
            raise TypeError(f"expected JSON {shape.__name__}, got {type(data).__name__}")
        return data
    from_dict = getattr(shape, "from_dict", None)
    if callable(from_dict):
        return from_dict(data)
    if dataclasses.is_dataclass(shape):
        return _dataclass_from_dict(shape, data)
    return shape(data)


def _dataclass_from_dict(shape, data):
    if not isinstance(data, dict):
        raise TypeError(f"expected JSON object, got {type(data).__name__}")
    return shape(**{
        k: v for k, v in data.items()
        if k in shape.__dataclass_fields__
    })


@dataclass
class AnswerSource:
    """A source cited by a sourced answer."""
    title: str = ""
    url: str = ""
    snippet: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AnswerSource":
        return _dataclass_from_dict(cls, data)


@dataclass
class SourcedAnswer:
    """Response shape for ``outputType=sourcedAnswer``."""
    answer: str = ""
    sources: list[AnswerSource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SourcedAnswer":
        if not isinstance(data, dict):
            raise TypeError(f"expected JSON object, got {type(data).__name__}")
        return cls(
            answer=data.get("answer", ""),
            sources=[AnswerSource.from_dict(s) for s in data.get("sources") or []],
        )


@dataclass
class BalanceResponse:
    """Response of GET /credits/balance."""
    balance: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "BalanceResponse":
        if not isinstance(data, dict):
            raise TypeError(f"expected JSON object, got {type(data).__name__}")
        balance = data.get("balance", 0.0)
        if isinstance(balance, bool) or not isinstance(balance, (int, float)):
            raise TypeError(f"balance must be a number, got {balance!r}")
        return cls(balance=float(balance))

    def to_dict(self) -> dict[str, Any]:
        return {"balance": self.balance}
