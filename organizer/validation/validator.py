"""
Field Validators

DESIGN DECISION: Validation happens before any mutation, field by field,
in the order the fields appear on the form. Every validator is a total
function: it returns None when the value is acceptable and a
ValidationIssue when it is not. Nothing in this module raises.

The per-entity rule sets return every issue found, so the caller can show
them all while focusing the first one.

IMPORTANT: Validation NEVER silently fixes values.
Trimming whitespace is the only normalization, and the models repeat it.
"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from organizer.models.records import (
    CONTACT_FIELD_MAX,
    NOTE_TEXT_MAX,
    OPERATION_MAX,
    TASK_TEXT_MAX,
    TRADER_NAME_MAX,
    ValidationIssue,
)


# =============================================================================
# PARSING HELPERS
# =============================================================================

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _label(field: str, label: Optional[str]) -> str:
    return label or field.replace("_", " ").capitalize()


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a candidate numeric value.

    Returns None for empty input, booleans, NaN, infinities, integers too
    large for a float, and anything that is not a plain number or numeric text.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError, InvalidOperation):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a candidate calendar date.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` text, and full
    ISO-8601 timestamps (the date part is kept). Returns None otherwise.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


# =============================================================================
# FIELD VALIDATORS
# =============================================================================

def validate_length(
    field: str,
    value: Any,
    min_length: int = 1,
    max_length: Optional[int] = None,
    required: bool = True,
    label: Optional[str] = None,
) -> Optional[ValidationIssue]:
    """
    Check a text value's presence and trimmed length.

    Fails if required and empty after trimming, or if a non-empty trimmed
    value is shorter than ``min_length`` or longer than ``max_length``.
    """
    name = _label(field, label)
    text = "" if value is None else str(value).strip()

    if not text:
        if required:
            return ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{name} is required",
            )
        return None

    too_short = len(text) < min_length
    too_long = max_length is not None and len(text) > max_length
    if too_short or too_long:
        bounds = (
            f"{min_length}-{max_length}"
            if max_length is not None
            else f"at least {min_length}"
        )
        return ValidationIssue(
            field=field,
            issue_type="invalid_length",
            message=f"{name} must be {bounds} characters (got {len(text)})",
        )

    return None


def validate_number(
    field: str,
    value: Any,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    required: bool = False,
    label: Optional[str] = None,
) -> Optional[ValidationIssue]:
    """
    Check a numeric value.

    An empty value is valid unless ``required``. A non-empty value must
    parse as a finite number inside ``[minimum, maximum]``.
    """
    name = _label(field, label)

    if _is_blank(value):
        if required:
            return ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{name} is required",
            )
        return None

    number = parse_number(value)
    if number is None:
        return ValidationIssue(
            field=field,
            issue_type="invalid_number",
            message=f"{name} must be a number",
        )

    if minimum is not None and number < minimum:
        return ValidationIssue(
            field=field,
            issue_type="out_of_range",
            message=f"{name} must be at least {minimum:g}",
        )
    if maximum is not None and number > maximum:
        return ValidationIssue(
            field=field,
            issue_type="out_of_range",
            message=f"{name} must be at most {maximum:g}",
        )

    return None


def validate_date(
    field: str,
    value: Any,
    required: bool = True,
    label: Optional[str] = None,
) -> Optional[ValidationIssue]:
    """Check that a value is a well-formed calendar date."""
    name = _label(field, label)

    if _is_blank(value):
        if required:
            return ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{name} is required",
            )
        return None

    if parse_date(value) is None:
        return ValidationIssue(
            field=field,
            issue_type="invalid_format",
            message=f"{name} must be a valid date (YYYY-MM-DD)",
        )

    return None


# =============================================================================
# ENTITY RULE SETS
# =============================================================================

def _collect(*issues: Optional[ValidationIssue]) -> list[ValidationIssue]:
    return [issue for issue in issues if issue is not None]


def validate_task(candidate: Mapping[str, Any]) -> list[ValidationIssue]:
    return _collect(
        validate_length("text", candidate.get("text"), max_length=TASK_TEXT_MAX,
                        label="Task text"),
    )


def validate_note(candidate: Mapping[str, Any]) -> list[ValidationIssue]:
    return _collect(
        validate_length("text", candidate.get("text"), max_length=NOTE_TEXT_MAX,
                        label="Note text"),
    )


def validate_transaction(candidate: Mapping[str, Any]) -> list[ValidationIssue]:
    """Transaction rules, in form order."""
    return _collect(
        validate_date("date", candidate.get("date"), required=True),
        validate_length("operation", candidate.get("operation"),
                        max_length=OPERATION_MAX),
        validate_number("pay", candidate.get("pay"), minimum=0),
        validate_number("receive", candidate.get("receive"), minimum=0),
        validate_length("call", candidate.get("call"), required=False,
                        max_length=CONTACT_FIELD_MAX),
        validate_length("contact", candidate.get("contact"), required=False,
                        max_length=CONTACT_FIELD_MAX),
        validate_length("other", candidate.get("other"), required=False,
                        max_length=CONTACT_FIELD_MAX),
    )


def validate_trader(candidate: Mapping[str, Any]) -> list[ValidationIssue]:
    """Trader rules, in form order."""
    return _collect(
        validate_length("name", candidate.get("name"), max_length=TRADER_NAME_MAX,
                        label="Trader name"),
        validate_number("amount", candidate.get("amount"), minimum=0, required=True),
    )
