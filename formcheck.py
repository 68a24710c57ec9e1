"""
Contact and reservation form rules, as enforced in the browser before submit.

These checks are advisory. The API only insists on the presence of its own
required fields and never calls into this module.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[+]?[\d\s-]{8,15}$", re.ASCII)

REQUIRED_MESSAGE = "This field is required"
EMAIL_MESSAGE = "Please enter a valid email address"
PHONE_MESSAGE = "Please enter a valid phone number"
DATE_MESSAGE = "Please select a future date"


@dataclass
class FormField:
    name: str
    value: str = ""
    kind: str = "text"  # input type: text, email, tel, date, ...
    required: bool = False


@dataclass
class FieldError:
    field: str
    message: str


def _first_of_kind(fields: List[FormField], kind: str) -> Tuple[int, Optional[FormField]]:
    return next(((i, f) for i, f in enumerate(fields) if f.kind == kind), (-1, None))


def validate_form(fields: List[FormField], today: Optional[date] = None) -> List[FieldError]:
    """
    Check a form the way the page does on submit.

    Every blank required field is reported, and the first email, tel and
    date inputs are checked when they hold a value. Dates before today fail;
    a date that does not parse is left alone. Errors come back in the order
    their fields appear on the page. An empty result means the form may be
    submitted.
    """
    today = today or date.today()
    found = []

    for position, field in enumerate(fields):
        if field.required and not field.value.strip():
            found.append((position, FieldError(field.name, REQUIRED_MESSAGE)))

    position, email = _first_of_kind(fields, "email")
    if email and email.value.strip() and not EMAIL_PATTERN.fullmatch(email.value):
        found.append((position, FieldError(email.name, EMAIL_MESSAGE)))

    position, phone = _first_of_kind(fields, "tel")
    if phone and phone.value.strip() and not PHONE_PATTERN.fullmatch(phone.value):
        found.append((position, FieldError(phone.name, PHONE_MESSAGE)))

    position, chosen = _first_of_kind(fields, "date")
    if chosen and chosen.value:
        try:
            selected = date.fromisoformat(chosen.value)
        except ValueError:
            selected = None
        if selected is not None and selected < today:
            found.append((position, FieldError(chosen.name, DATE_MESSAGE)))

    found.sort(key=lambda entry: entry[0])
    return [error for _, error in found]


def first_error(fields: List[FormField], today: Optional[date] = None) -> Optional[FieldError]:
    """The error the page scrolls to, or None when the form is valid"""
    errors = validate_form(fields, today)
    return errors[0] if errors else None
