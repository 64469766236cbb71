"""
Input validators for the auth module.

Pure functions: they never mutate their input and never raise. Each
validator returns a ``ValidationResult`` carrying the first failing rule's
message, except the boolean predicates ``is_valid_email`` and
``is_valid_gender``.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from .constants import PASSWORD_RULES, AuthMessages, PasswordRules
from .models import Gender, ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")

NAME_PATTERN = re.compile(r"^[a-zA-Z\u0600-\u06FF\s'-]+$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50

MIN_AGE_YEARS = 1
MAX_AGE_YEARS = 120

_NON_DIGITS = re.compile(r"[^0-9]")
_UNSAFE_CHARS = re.compile(r"""[<>"'`;()]""")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


@dataclass(frozen=True)
class PhoneRule:
    """Calling code, national number length and national number pattern."""

    code: str
    length: int
    pattern: re.Pattern


COUNTRY_PHONE_RULES: dict[str, PhoneRule] = {
    "SA": PhoneRule("+966", 9, re.compile(r"^5[0-9]{8}$")),
    "EG": PhoneRule("+20", 10, re.compile(r"^1[0125][0-9]{8}$")),
    "AE": PhoneRule("+971", 9, re.compile(r"^5[024568][0-9]{7}$")),
    "KW": PhoneRule("+965", 8, re.compile(r"^[569][0-9]{7}$")),
    "QA": PhoneRule("+974", 8, re.compile(r"^[3567][0-9]{7}$")),
    "BH": PhoneRule("+973", 8, re.compile(r"^[3679][0-9]{7}$")),
    "OM": PhoneRule("+968", 8, re.compile(r"^[79][0-9]{7}$")),
    "JO": PhoneRule("+962", 9, re.compile(r"^7[789][0-9]{7}$")),
    "LB": PhoneRule("+961", 8, re.compile(r"^[3-9][0-9]{7}$")),
    "US": PhoneRule("+1", 10, re.compile(r"^[0-9]{10}$")),
    "GB": PhoneRule("+44", 10, re.compile(r"^7[0-9]{9}$")),
}


def is_valid_email(email: Optional[str]) -> bool:
    """Check the basic ``local@domain.tld`` shape."""
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_password(
    password: Optional[str],
    rules: PasswordRules = PASSWORD_RULES,
) -> ValidationResult:
    """
    Check a password against the password policy.

    Rules are evaluated in a fixed order (minimum length, maximum length,
    uppercase, special character, lowercase, digit) and the first failing
    rule's message is returned.

    Args:
        password: Candidate password
        rules: Policy to apply, defaults to the platform policy

    Returns:
        ValidationResult
    """
    password = password or ""

    if len(password) < rules.min_length:
        return ValidationResult.fail(f"Password must be at least {rules.min_length} characters")

    if len(password) > rules.max_length:
        return ValidationResult.fail(f"Password must be less than {rules.max_length} characters")

    if rules.require_uppercase and not _UPPERCASE.search(password):
        return ValidationResult.fail("Password must contain at least one uppercase letter")

    if rules.require_special and not _SPECIAL.search(password):
        return ValidationResult.fail(
            "Password must contain at least one special character (!@#$%^&*...)"
        )

    if rules.require_lowercase and not _LOWERCASE.search(password):
        return ValidationResult.fail("Password must contain at least one lowercase letter")

    if rules.require_number and not _DIGIT.search(password):
        return ValidationResult.fail("Password must contain at least one number")

    return ValidationResult.ok()


def is_valid_name(name: Optional[str]) -> ValidationResult:
    """Check a first or last name."""
    trimmed = (name or "").strip()

    if not trimmed:
        return ValidationResult.fail("Name is required")

    if len(trimmed) < NAME_MIN_LENGTH:
        return ValidationResult.fail(f"Name must be at least {NAME_MIN_LENGTH} characters")

    if len(trimmed) > NAME_MAX_LENGTH:
        return ValidationResult.fail(f"Name must be less than {NAME_MAX_LENGTH} characters")

    if not NAME_PATTERN.match(trimmed):
        return ValidationResult.fail(
            "Name can only contain letters, spaces, hyphens and apostrophes"
        )

    # Scripts without case (Arabic) pass this check unchanged
    first = trimmed[0]
    if first != first.upper():
        return ValidationResult.fail("Name must start with a capital letter")

    return ValidationResult.ok()


def _parse_date(value: Union[str, date, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def is_valid_date_of_birth(
    dob: Union[str, date, None],
    today: Optional[date] = None,
) -> ValidationResult:
    """
    Check that a date of birth is plausible.

    The date must parse, must not be in the future, and must imply an age
    between 1 and 120 years inclusive. Age is a full year/month/day
    comparison, so a date exactly 120 years before today is accepted and
    the day before it is not.

    Args:
        dob: ISO date string (``YYYY-MM-DD``) or a ``date``
        today: Reference day, defaults to the current local date

    Returns:
        ValidationResult
    """
    born = _parse_date(dob)
    if born is None:
        return ValidationResult.fail("Invalid date format")

    today = today or date.today()

    if born > today:
        return ValidationResult.fail("Date of birth cannot be in the future")

    if born > _years_before(today, MIN_AGE_YEARS):
        return ValidationResult.fail("You must be at least 1 year old")

    if born < _years_before(today, MAX_AGE_YEARS):
        return ValidationResult.fail(AuthMessages.INVALID_DOB)

    return ValidationResult.ok()


def is_valid_gender(gender: Optional[str]) -> bool:
    return gender in {g.value for g in Gender}


def find_phone_rule(country_code: str) -> Optional[PhoneRule]:
    """Look up the phone rule for a calling code such as ``+966``."""
    for rule in COUNTRY_PHONE_RULES.values():
        if rule.code == country_code:
            return rule
    return None


def is_valid_phone(country_code: str, phone: Optional[str]) -> ValidationResult:
    """
    Check a national phone number against its country's rule.

    Non-digit characters are stripped before checking length and pattern.
    """
    rule = find_phone_rule(country_code)
    if rule is None:
        return ValidationResult.fail("Invalid country code")

    digits = _NON_DIGITS.sub("", phone or "")

    if len(digits) != rule.length:
        return ValidationResult.fail(
            f"Phone number must be {rule.length} digits for {country_code}"
        )

    if not rule.pattern.match(digits):
        return ValidationResult.fail(f"Invalid phone number format for {country_code}")

    return ValidationResult.ok()


def do_passwords_match(password: str, confirm_password: str) -> bool:
    return password == confirm_password


def sanitize_input(value: Optional[str]) -> str:
    """
    Strip markup and script vectors from free text.

    Trims whitespace, removes ``< > " ' ` ; ( )``, any ``javascript:``
    scheme and inline event-handler prefixes such as ``onclick=``.
    """
    if not value:
        return ""
    cleaned = value.strip()
    cleaned = _UNSAFE_CHARS.sub("", cleaned)
    cleaned = _JAVASCRIPT_SCHEME.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned


def normalize_phone(country_code: str, phone: str) -> str:
    """Join a calling code and national number into ``+CCNNNN`` form."""
    return f"{country_code}{_NON_DIGITS.sub('', phone)}"


def mask_email(email: str) -> str:
    """Mask the local part of an email for log lines: ``jan***@example.com``."""
    local, sep, domain = email.partition("@")
    if not sep or not domain:
        return email
    visible = min(3, len(local) // 2)
    return f"{local[:visible]}***@{domain}"


INTERNATIONAL_PHONE_PATTERN = re.compile(r"^\+[1-9][0-9]{1,3}[0-9]{7,12}$")
_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)


def is_valid_international_phone(phone: Optional[str]) -> bool:
    """Check a stored phone number in ``+<calling code><number>`` form."""
    if not phone:
        return False
    return INTERNATIONAL_PHONE_PATTERN.match(phone) is not None


def is_valid_http_url(url: Optional[str]) -> bool:
    return bool(url) and _HTTP_URL.match(url) is not None
