"""
Validation Service

Declarative per-field rules applied to request payloads before anything
reaches the database.

Rules are data, not code: each endpoint owns a rule table mapping a field
name to a list of Rule(kind, param) entries, and a single generic
validate() evaluates any table.

Rule kinds:
- required: value must be present and non-empty
- string: value must be a string
- email: value must be a syntactically valid email address
- min / max / size: length bounds (characters) on the value
- unique: no existing row has this value in the given column
          (param is the mapped column, e.g. Book.isbn)

All-or-nothing: every violation of every field is collected, and if there
is at least one, ValidationFailed is raised with all of them. A payload
either comes back fully normalized or nothing happens.

Usage:
    from library_api.services.validation import BOOK_RULES, validate

    fields = validate(payload, BOOK_RULES, db=db)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.orm import Session

from library_api.exceptions import ValidationFailed
from library_api.models import Book, User

logger = logging.getLogger(__name__)


# =============================================================================
# Rule Definition
# =============================================================================
@dataclass(frozen=True)
class Rule:
    """A single constraint on a field: its kind and optional parameter."""

    kind: str
    param: Any = None


RuleSet = dict[str, list[Rule]]


# Rule kinds that check the value's type; when one fails, the length rules
# that follow it are meaningless and are skipped.
TYPE_RULES = frozenset({"string", "email"})

# Fields never stripped of surrounding whitespace
UNTRIMMED_FIELDS = frozenset({"password"})

MESSAGES = {
    "required": "The {attribute} field is required.",
    "string": "The {attribute} field must be a string.",
    "email": "The {attribute} field must be a valid email address.",
    "min": "The {attribute} field must be at least {param} characters.",
    "max": "The {attribute} field must not be greater than {param} characters.",
    "size": "The {attribute} field must be {param} characters.",
    "unique": "The {attribute} has already been taken.",
}


# =============================================================================
# Rule Tables
# =============================================================================
BOOK_RULES: RuleSet = {
    "title": [Rule("required"), Rule("string"), Rule("min", 3), Rule("max", 255)],
    "author": [Rule("required"), Rule("string"), Rule("min", 3), Rule("max", 100)],
    "summary": [Rule("required"), Rule("string"), Rule("min", 10), Rule("max", 500)],
    "isbn": [Rule("required"), Rule("string"), Rule("size", 13), Rule("unique", Book.isbn)],
}

REGISTER_RULES: RuleSet = {
    "name": [Rule("required"), Rule("string"), Rule("max", 255)],
    "email": [Rule("required"), Rule("email"), Rule("max", 255), Rule("unique", User.email)],
    "password": [Rule("required"), Rule("string"), Rule("min", 8)],
}

LOGIN_RULES: RuleSet = {
    "email": [Rule("required"), Rule("email")],
    "password": [Rule("required"), Rule("string")],
}


# =============================================================================
# Checks
# =============================================================================
def _length(value: Any) -> Any:
    """Characters for strings, items for collections, the value for numbers."""
    if isinstance(value, (str, list, dict)):
        return len(value)
    return value


def _is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


CHECKS = {
    "string": lambda value, _: isinstance(value, str),
    "email": lambda value, _: _is_email(value),
    "min": lambda value, param: _length(value) >= param,
    "max": lambda value, param: _length(value) <= param,
    "size": lambda value, param: _length(value) == param,
}


def _is_taken(db: Session | None, column: Any, value: Any, ignore_id: int | None) -> bool:
    """
    Check whether another row already holds value in column.

    Args:
        db: Database session
        column: Mapped column attribute, e.g. Book.isbn
        value: Candidate value
        ignore_id: Primary key of the row being updated, excluded from
            the check

    Returns:
        True if the value is already used by a different row
    """
    if db is None:
        raise RuntimeError("The unique rule needs a database session")

    model = column.class_
    stmt = select(model.id).where(column == value)
    if ignore_id is not None:
        stmt = stmt.where(model.id != ignore_id)

    return db.execute(stmt.limit(1)).first() is not None


def _message(kind: str, field: str, param: Any = None) -> str:
    return MESSAGES[kind].format(attribute=field.replace("_", " "), param=param)


# =============================================================================
# Validator
# =============================================================================
def normalize(data: Mapping[str, Any], rules: RuleSet) -> dict[str, Any]:
    """
    Normalize raw input for the fields named in rules.

    Strings are stripped (except password fields) and empty values
    become None, so "required" treats "", "   " and missing alike.
    """
    values: dict[str, Any] = {}
    for field in rules:
        value = data.get(field)
        if isinstance(value, str):
            if field not in UNTRIMMED_FIELDS:
                value = value.strip()
            if value == "":
                value = None
        elif value in ([], {}):
            value = None
        values[field] = value
    return values


def check_field(
    field: str,
    value: Any,
    rules: list[Rule],
    db: Session | None = None,
    ignore_id: int | None = None,
) -> list[str]:
    """
    Evaluate one field's rules and return its violation messages.

    A missing value only reports "required". The unique rule is evaluated
    only when every other rule of the field passed.
    """
    if value is None:
        if any(rule.kind == "required" for rule in rules):
            return [_message("required", field)]
        return []

    messages: list[str] = []
    for rule in rules:
        if rule.kind == "required":
            continue

        if rule.kind == "unique":
            if not messages and _is_taken(db, rule.param, value, ignore_id):
                messages.append(_message("unique", field))
            continue

        if not CHECKS[rule.kind](value, rule.param):
            messages.append(_message(rule.kind, field, rule.param))
            if rule.kind in TYPE_RULES:
                break

    return messages


def validate(
    data: Mapping[str, Any] | None,
    rules: RuleSet,
    db: Session | None = None,
    ignore_id: int | None = None,
) -> dict[str, Any]:
    """
    Validate a payload against a rule table.

    Args:
        data: Raw field-value mapping (e.g. a parsed JSON body)
        rules: Rule table for the endpoint
        db: Database session, required when the table has unique rules
        ignore_id: Row excluded from unique checks (the record being updated)

    Returns:
        Normalized payload containing only the ruled fields that are set

    Raises:
        ValidationFailed: With every violation, grouped by field
    """
    values = normalize(data or {}, rules)

    errors: dict[str, list[str]] = {}
    for field, field_rules in rules.items():
        messages = check_field(field, values[field], field_rules, db, ignore_id)
        if messages:
            errors[field] = messages

    if errors:
        logger.debug(f"Validation failed for fields: {sorted(errors)}")
        raise ValidationFailed(errors)

    return {field: value for field, value in values.items() if value is not None}
