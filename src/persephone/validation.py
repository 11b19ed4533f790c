"""
Validator adapters

Any object exposing ``parse(data)`` (raising on invalid input) is a validator.
``safe_parse(data)`` is optional; when present it must be callable and return
a SafeParseResult-like object. Pydantic models and types are adapted through
PydanticValidator.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

T = TypeVar("T")


@dataclass
class SafeParseResult(Generic[T]):
    """Outcome of a non-raising parse."""
    success: bool
    data: Optional[T] = None
    error: Optional[BaseException] = None


def is_validator(obj: Any) -> bool:
    """True if obj implements the validator contract."""
    if obj is None:
        return False
    if not callable(getattr(obj, "parse", None)):
        return False
    if hasattr(obj, "safe_parse") and not callable(obj.safe_parse):
        return False
    return True


class PydanticValidator(Generic[T]):
    """
    Validator backed by pydantic.

    Works with BaseModel subclasses and any type pydantic understands
    (``list[Todo]``, ``dict[str, int]``, ...). Models are dumped back to
    plain JSON-compatible data so the default codec can store them.

    Example:
        class Todo(BaseModel):
            title: str
            done: bool = False

        Schema(version=1, default=[], validator=PydanticValidator(list[Todo]))
    """

    def __init__(self, type_: Any, dump: bool = True):
        self.type_ = type_
        self._adapter = TypeAdapter(type_)
        self._dump = dump

    def parse(self, data: Any) -> T:
        value = self._adapter.validate_python(data)
        if self._dump:
            return self._adapter.dump_python(value, mode="json")
        return value

    def safe_parse(self, data: Any) -> SafeParseResult[T]:
        try:
            return SafeParseResult(success=True, data=self.parse(data))
        except PydanticValidationError as e:
            return SafeParseResult(success=False, error=e)

    def __repr__(self) -> str:
        return f"<PydanticValidator {getattr(self.type_, '__name__', self.type_)!r}>"


def as_validator(obj: Any) -> Any:
    """Wrap pydantic model classes; return other objects unchanged."""
    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return PydanticValidator(obj)
    return obj


def validate(data: Any, validator: Any, key: str) -> Any:
    """
    Run a validator's parse and return its result.

    Raises:
        ValidationError: If validator lacks the contract or rejects data
    """
    validator = as_validator(validator)
    if not is_validator(validator):
        raise ValidationError(
            "Invalid validator: must implement parse()", key, data
        )

    try:
        return validator.parse(data)
    except Exception as e:
        raise ValidationError(str(e), key, data, e) from e


def safe_validate(data: Any, validator: Any) -> SafeParseResult:
    """
    Non-raising validation.

    Uses the validator's own safe_parse when it has one, otherwise
    wraps parse.
    """
    validator = as_validator(validator)
    if not is_validator(validator):
        return SafeParseResult(
            success=False,
            error=TypeError("Invalid validator: must implement parse()"),
        )

    if hasattr(validator, "safe_parse"):
        result = validator.safe_parse(data)
        if isinstance(result, SafeParseResult):
            return result
        if isinstance(result, dict):
            return SafeParseResult(
                success=bool(result.get("success")),
                data=result.get("data"),
                error=result.get("error"),
            )
        return SafeParseResult(
            success=bool(getattr(result, "success", False)),
            data=getattr(result, "data", None),
            error=getattr(result, "error", None),
        )

    try:
        return SafeParseResult(success=True, data=validator.parse(data))
    except Exception as e:
        return SafeParseResult(success=False, error=e)
