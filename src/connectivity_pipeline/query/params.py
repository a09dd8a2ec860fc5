"""Request parameter models and validation.

Requests arrive as a flat map of named values. Each endpoint declares a
pydantic model for its parameters; validation turns the map into that model
or into a list of human-readable reasons why the request is rejected.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator

from connectivity_pipeline.query.filters import WILDCARD


class InvalidRequestError(ValueError):
    """Raised when a request fails validation; the pipeline is not run."""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__("; ".join(messages))


@dataclass
class RequestValidation:
    """Outcome of request validation.

    Attributes:
        passed: Whether the request may be run
        messages: Reasons for rejection (or the help text)
    """
    passed: bool
    messages: list[str] = field(default_factory=list)


def _split_tokens(v: Any) -> Any:
    """Accept a whitespace-separated string where a list is expected."""
    if isinstance(v, str):
        return v.split()
    return v


def _join_tokens(v: Any) -> Any:
    """Accept a token list where a signature string is expected."""
    if isinstance(v, (list, tuple)):
        return " ".join(str(token) for token in v)
    return v


class AnnotationQuery(BaseModel):
    """Parameters of the sample annotation table endpoint."""

    query: str = Field(
        default=WILDCARD,
        description="Signature for computing Zhang scores (wildcard = no score)",
    )
    version: str = Field(default="v1", description="API version")
    limit: int = Field(
        default=10,
        ge=1,
        description="Number of samples returned when no pwids are selected",
    )
    pwids: list[str] = Field(
        default_factory=lambda: [WILDCARD],
        description="Regular expressions selecting samples by pwid",
    )
    features: list[str] = Field(
        default_factory=lambda: [WILDCARD],
        description="Features to return (wildcard = default feature set)",
    )

    @field_validator("pwids", "features", mode="before")
    @classmethod
    def split_lists(cls, v: Any) -> Any:
        return _split_tokens(v)

    @field_validator("pwids")
    @classmethod
    def pwids_compile(cls, v: list[str]) -> list[str]:
        """Reject pwid patterns that are not valid regular expressions."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid pwid pattern '{pattern}': {e}") from e
        return v

    @field_validator("query", mode="before")
    @classmethod
    def join_query(cls, v: Any) -> Any:
        return _join_tokens(v)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        """A blank signature means no signature."""
        return v.strip() or WILDCARD


class HistogramQuery(BaseModel):
    """Parameters of the binned Zhang score endpoint."""

    query: str = Field(..., description="Signature for computing Zhang scores")
    version: str = Field(default="v1", description="API version")
    bins_x: int = Field(default=20, ge=1, description="Buckets along the first axis")
    bins_y: int = Field(default=0, description="Buckets along the score axis (<= 0 gives 1-D)")

    @field_validator("query", mode="before")
    @classmethod
    def join_query(cls, v: Any) -> Any:
        return _join_tokens(v)


class SignatureCheckQuery(BaseModel):
    """Parameters of the signature check endpoint."""

    query: str = Field(..., description="Signature to check against the gene table")
    version: str = Field(default="v1", description="API version")

    @field_validator("query", mode="before")
    @classmethod
    def join_query(cls, v: Any) -> Any:
        return _join_tokens(v)


def required_checks(params: Mapping[str, Any], required: Sequence[str]) -> list[str]:
    """Messages for required parameters that are absent or empty."""
    messages = []
    for name in required:
        value = params.get(name)
        if value is None:
            messages.append(f"{name} not defined in request parameters")
        elif not str(_join_tokens(value)).strip():
            messages.append(f"{name} is empty in request parameters")
    return messages


def validate_params(
    model: type[BaseModel],
    params: Mapping[str, Any],
    required: Sequence[str] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> tuple[RequestValidation, BaseModel | None]:
    """Validate a flat parameter map against an endpoint model.

    Args:
        model: Pydantic model of the endpoint parameters
        params: Parameters supplied with the request
        required: Names that must be present and non-empty
        defaults: Values used for parameters the request omits

    Returns:
        Tuple of (validation outcome, parsed parameters or None)
    """
    messages = required_checks(params, required or ())
    if messages:
        return RequestValidation(passed=False, messages=messages), None

    merged = {
        name: value
        for name, value in {**(defaults or {}), **params}.items()
        if name in model.model_fields
    }

    try:
        parsed = model.model_validate(merged)
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        return RequestValidation(passed=False, messages=messages), None

    return RequestValidation(passed=True), parsed
