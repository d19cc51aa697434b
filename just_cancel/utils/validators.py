"""
Input Validation

Validates ``just-cancel`` tool arguments against the declared JSON Schema
and converts them into typed ToolArguments.

Validation failures raise InvalidArguments with the offending field, the
provided value and what was expected.
"""

from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from ..catalog import TOOL_INPUT_SCHEMA
from ..errors import InvalidArguments


@dataclass
class ManualSubscription:
    """Subscription the user typed in"""

    service: str
    monthly_cost: float
    category: str | None = None


@dataclass
class BankStatementRef:
    """Uploaded statement file reference"""

    download_url: str
    file_id: str


@dataclass
class ToolArguments:
    """Validated tool call arguments"""

    subscriptions: list[ManualSubscription] = field(default_factory=list)
    total_monthly_spend: float | None = None
    view_filter: str | None = None
    statement_text: str | None = None
    bank_statement: BankStatementRef | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """No arguments supplied at all"""
        return not self.raw


def _field_path(error) -> str | None:
    if error.validator == "additionalProperties":
        extras = [key for key in error.instance if key not in error.schema.get("properties", {})]
        prefix = ".".join(str(part) for part in error.absolute_path)
        name = extras[0] if extras else None
        if prefix and name:
            return f"{prefix}.{name}"
        return name or prefix or None

    if error.validator == "required":
        # Message reads "'file_id' is a required property"
        missing = error.message.split("'")[1] if "'" in error.message else None
        prefix = ".".join(str(part) for part in error.absolute_path)
        if prefix and missing:
            return f"{prefix}.{missing}"
        return missing or prefix or None

    path = ".".join(str(part) for part in error.absolute_path)
    return path or None


def _expected(error) -> str | None:
    if error.validator == "type":
        expected = error.validator_value
        return " or ".join(expected) if isinstance(expected, list) else str(expected)
    if error.validator == "enum":
        return f"one of {error.validator_value}"
    if error.validator == "additionalProperties":
        return f"only {sorted(error.schema.get('properties', {}))}"
    if error.validator == "required":
        return f"required properties {error.validator_value}"
    return None


def validate_tool_arguments(
    arguments: Any, schema: dict = TOOL_INPUT_SCHEMA
) -> ToolArguments:
    """
    Validate raw tool arguments.

    Args:
        arguments: Arguments as received (None means no arguments)
        schema: JSON Schema to validate against

    Returns:
        Typed ToolArguments

    Raises:
        InvalidArguments: If arguments do not conform to the schema
    """
    if arguments is None:
        arguments = {}

    validator = Draft7Validator(schema)
    error = best_match(validator.iter_errors(arguments))
    if error is not None:
        raise InvalidArguments(
            message=error.message,
            field=_field_path(error),
            provided_value=error.instance,
            expected=_expected(error),
        )

    bank_statement = arguments.get("bank_statement")

    return ToolArguments(
        subscriptions=[
            ManualSubscription(
                service=item["service"],
                monthly_cost=float(item["monthly_cost"]),
                category=item.get("category"),
            )
            for item in arguments.get("subscriptions", [])
        ],
        total_monthly_spend=arguments.get("total_monthly_spend"),
        view_filter=arguments.get("view_filter"),
        statement_text=arguments.get("statement_text"),
        bank_statement=BankStatementRef(**bank_statement) if bank_statement else None,
        raw=dict(arguments),
    )
