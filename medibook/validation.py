"""Client-side form validation.

Every validator is pure: it takes the form values and returns a dict of
field -> message. An empty dict means the form may be submitted. Validation
errors never reach the network layer and are never logged.
"""
import re
from datetime import date, datetime, timezone
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse

from medibook import config
from medibook.models import Role

FormErrors = Dict[str, str]

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PASSWORD_STRENGTH_PATTERN = re.compile(r'(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')

LOGIN_MIN_PASSWORD = 6
REGISTRATION_MIN_PASSWORD = 8
MIN_NAME_LENGTH = 2
MIN_REASON_LENGTH = 10

SPECIALIZATION_VALUES = frozenset(value for value, _ in config.SPECIALIZATIONS)


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_url(url: str) -> bool:
    """Absolute URL with a scheme and a host."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def _check_email(email: str, errors: FormErrors):
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email address"


def validate_login(email: str, password: str) -> FormErrors:
    """
    Validate login credentials.

    Args:
        email: Email as typed
        password: Password as typed

    Returns:
        Field errors (empty if valid)

    Example:
        >>> validate_login("user@example.com", "12345")
        {'password': 'Password must be at least 6 characters'}
    """
    errors: FormErrors = {}
    _check_email(email, errors)

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < LOGIN_MIN_PASSWORD:
        errors["password"] = f"Password must be at least {LOGIN_MIN_PASSWORD} characters"

    return errors


def validate_registration(form: Mapping[str, str], role: Role) -> FormErrors:
    """
    Validate a registration form for the given role.

    Expected keys: name, email, password, confirm_password, photo_url and,
    for doctors, specialization. Missing keys count as empty.
    """
    errors: FormErrors = {}
    name = form.get("name") or ""
    email = form.get("email") or ""
    password = form.get("password") or ""
    confirm_password = form.get("confirm_password") or ""
    photo_url = form.get("photo_url") or ""

    if not name.strip():
        errors["name"] = "Name is required"
    elif len(name.strip()) < MIN_NAME_LENGTH:
        errors["name"] = f"Name must be at least {MIN_NAME_LENGTH} characters"

    _check_email(email, errors)

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < REGISTRATION_MIN_PASSWORD:
        errors["password"] = (
            f"Password must be at least {REGISTRATION_MIN_PASSWORD} characters"
        )
    elif not PASSWORD_STRENGTH_PATTERN.match(password):
        errors["password"] = (
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )

    if not confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if Role.parse(role) is Role.DOCTOR:
        specialization = (form.get("specialization") or "").strip()
        if not specialization:
            errors["specialization"] = "Specialization is required for doctors"
        elif specialization not in SPECIALIZATION_VALUES:
            errors["specialization"] = "Please select a specialization from the list"

    if photo_url.strip() and not is_valid_url(photo_url):
        errors["photo_url"] = "Please enter a valid URL"

    return errors


def validate_booking(draft: Mapping[str, str], today: Optional[date] = None) -> FormErrors:
    """
    Validate a booking draft.

    Dates compare as calendar days: booking for today is allowed.

    Args:
        draft: Mapping with selected_date (YYYY-MM-DD), selected_time and reason
        today: Reference day (defaults to the local current date)

    Returns:
        Field errors (empty if valid)
    """
    errors: FormErrors = {}
    today = today or date.today()
    selected_date = draft.get("selected_date") or ""
    selected_time = draft.get("selected_time") or ""
    reason = (draft.get("reason") or "").strip()

    if not selected_date:
        errors["selected_date"] = "Please select a date"
    else:
        try:
            day = date.fromisoformat(selected_date)
        except ValueError:
            errors["selected_date"] = "Please select a valid date"
        else:
            if day < today:
                errors["selected_date"] = "Date cannot be in the past"

    if not selected_time:
        errors["selected_time"] = "Please select a time"
    elif selected_time not in config.TIME_SLOTS:
        errors["selected_time"] = "Please select one of the available time slots"

    if not reason:
        errors["reason"] = "Please provide a reason"
    elif len(reason) < MIN_REASON_LENGTH:
        errors["reason"] = f"At least {MIN_REASON_LENGTH} characters required"

    return errors


def combine_date_time(selected_date: str, selected_time: str) -> str:
    """
    Combine a calendar date and a slot label into one UTC instant.

    The pair is read as local wall-clock time.

    Example:
        >>> combine_date_time("2026-11-02", "02:30 PM")  # on a UTC host
        '2026-11-02T14:30:00.000Z'

    Raises:
        ValueError: If the pair does not parse
    """
    local = datetime.strptime(f"{selected_date} {selected_time}", "%Y-%m-%d %I:%M %p")
    instant = local.astimezone(timezone.utc)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")
