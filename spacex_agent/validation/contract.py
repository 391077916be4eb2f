"""Declarative input contracts for entrypoints.

Each entrypoint declares its input as a tuple of ``FieldSpec`` entries. The
contract check is an explicit function over that declaration: it returns a
tagged ``ContractResult`` carrying either the validated input, with defaults
filled in, or every field-level error found.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from ..config.validation import ValidationError

FIELD_TYPES = ("string", "number", "integer", "boolean", "enum")


@dataclass(frozen=True)
class FieldSpec:
    """Declaration of one input field."""
    name: str
    type: str
    required: bool = False
    default: Any = None
    choices: Optional[tuple[str, ...]] = None
    minimum: Optional[float] = None
    description: str = ""

    def __post_init__(self):
        if self.type not in FIELD_TYPES:
            raise ValueError(f"Unsupported field type: {self.type}")
        if self.type == "enum" and not self.choices:
            raise ValueError(f"Enum field {self.name} needs choices")

    def describe(self) -> dict[str, Any]:
        """JSON-schema style description of the field."""
        schema: dict[str, Any] = {
            "type": "string" if self.type == "enum" else self.type,
        }
        if self.choices:
            schema["enum"] = list(self.choices)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.default is not None:
            schema["default"] = self.default
        if self.description:
            schema["description"] = self.description
        return schema


@dataclass(frozen=True)
class ContractResult:
    """Result of checking raw input against a contract."""
    success: bool
    value: Optional[dict[str, Any]] = None
    errors: tuple[ValidationError, ...] = ()

    @classmethod
    def ok(cls, value: dict[str, Any]) -> "ContractResult":
        """Create successful result with the validated input."""
        return cls(success=True, value=value)

    @classmethod
    def failed(cls, errors: list[ValidationError]) -> "ContractResult":
        """Create failed result carrying field errors."""
        return cls(success=False, errors=tuple(errors))


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def check_field(spec: FieldSpec, value: Any) -> Optional[str]:
    """
    Check a single present value against its field spec.

    Returns:
        Reason string when the value is invalid, None otherwise
    """
    if spec.type == "string":
        if not isinstance(value, str):
            return "Must be a string"
    elif spec.type == "number":
        if not _is_number(value):
            return "Must be a finite number"
    elif spec.type == "integer":
        if not _is_number(value) or int(value) != value:
            return "Must be an integer"
    elif spec.type == "boolean":
        if not isinstance(value, bool):
            return "Must be a boolean"
    elif spec.type == "enum":
        if value not in spec.choices:
            return f"Must be one of: {', '.join(spec.choices)}"

    if spec.minimum is not None and value < spec.minimum:
        return f"Must be at least {spec.minimum:g}"

    return None


@dataclass(frozen=True)
class InputContract:
    """Ordered set of field specs describing an entrypoint's input."""
    fields: tuple[FieldSpec, ...] = ()

    def validate(self, raw: Any) -> ContractResult:
        """
        Check raw input against the contract.

        Missing optional fields take their declared default (or None).
        Fields the contract does not declare are dropped.

        Args:
            raw: Untyped input, expected to be a mapping or None

        Returns:
            ContractResult with validated input or all field errors
        """
        if raw is None:
            raw = {}

        if not isinstance(raw, Mapping):
            return ContractResult.failed([ValidationError(
                field="input",
                message="Must be an object",
                value=raw
            )])

        errors = []
        value: dict[str, Any] = {}

        for spec in self.fields:
            if spec.name not in raw or raw[spec.name] is None:
                if spec.required:
                    errors.append(ValidationError(
                        field=spec.name,
                        message="Required",
                        value=None
                    ))
                else:
                    value[spec.name] = spec.default
                continue

            candidate = raw[spec.name]
            reason = check_field(spec, candidate)
            if reason:
                errors.append(ValidationError(
                    field=spec.name,
                    message=reason,
                    value=candidate
                ))
                continue

            if spec.type == "integer":
                candidate = int(candidate)
            value[spec.name] = candidate

        if errors:
            return ContractResult.failed(errors)
        return ContractResult.ok(value)

    def describe(self) -> dict[str, Any]:
        """JSON-schema style description of the whole contract."""
        return {
            "type": "object",
            "required": [spec.name for spec in self.fields if spec.required],
            "properties": {spec.name: spec.describe() for spec in self.fields},
        }


def contract(*fields: FieldSpec) -> InputContract:
    """Build an InputContract from field specs."""
    names = [spec.name for spec in fields]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate field names in contract: {names}")
    return InputContract(fields=tuple(fields))
