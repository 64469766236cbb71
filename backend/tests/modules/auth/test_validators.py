import pytest
from datetime import date

from modules.auth.constants import PasswordRules
from modules.auth.validators import (
    do_passwords_match,
    find_phone_rule,
    is_valid_date_of_birth,
    is_valid_email,
    is_valid_gender,
    is_valid_http_url,
    is_valid_international_phone,
    is_valid_name,
    is_valid_phone,
    mask_email,
    normalize_phone,
    sanitize_input,
    validate_password,
)


TODAY = date(2024, 6, 15)


class TestEmail:
    @pytest.mark.parametrize(
        "email",
        ["jane@example.com", "a.b+c@sub.example.co", "x@y.z"],
    )
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize(
        "email",
        ["", None, "jane", "jane@", "@example.com", "jane@example", "ja ne@example.com", "a@b@c.d"],
    )
    def test_invalid(self, email):
        assert not is_valid_email(email)


class TestPassword:
    def test_strong_password_passes(self):
        result = validate_password("Str0ng!pass")
        assert result.valid
        assert result.error is None

    def test_too_short(self):
        result = validate_password("Ab1!")
        assert not result.valid
        assert result.error == "Password must be at least 8 characters"

    def test_too_long(self):
        result = validate_password("Aa1!" * 40)
        assert result.error == "Password must be less than 128 characters"

    def test_missing_uppercase(self):
        assert validate_password("str0ng!pass").error == "Password must contain at least one uppercase letter"

    def test_missing_special(self):
        assert validate_password("Str0ngpass").error.startswith(
            "Password must contain at least one special character"
        )

    def test_missing_lowercase(self):
        assert validate_password("STR0NG!PASS").error == "Password must contain at least one lowercase letter"

    def test_missing_number(self):
        assert validate_password("Strong!pass").error == "Password must contain at least one number"

    def test_first_failing_rule_wins(self):
        """Uppercase is checked before special character and digit."""
        assert validate_password("weakpassword").error == "Password must contain at least one uppercase letter"

    def test_none_is_too_short(self):
        assert not validate_password(None).valid

    def test_custom_rules(self):
        rules = PasswordRules(min_length=4, require_special=False, require_uppercase=False)
        assert validate_password("abc1", rules).valid


class TestName:
    @pytest.mark.parametrize("name", ["Jane", "O'Brien", "Anne-Marie", "Mary Jane", "محمد"])
    def test_valid(self, name):
        assert is_valid_name(name).valid

    def test_trimmed_before_checks(self):
        assert is_valid_name("  Jo  ").valid

    def test_required(self):
        assert is_valid_name("   ").error == "Name is required"
        assert is_valid_name(None).error == "Name is required"

    def test_too_short(self):
        assert is_valid_name("J").error == "Name must be at least 2 characters"

    def test_too_long(self):
        assert is_valid_name("A" * 51).error == "Name must be less than 50 characters"

    def test_rejects_digits(self):
        assert is_valid_name("Jane2").error == "Name can only contain letters, spaces, hyphens and apostrophes"

    def test_must_start_with_capital(self):
        assert is_valid_name("jane").error == "Name must start with a capital letter"


class TestDateOfBirth:
    def test_valid(self):
        assert is_valid_date_of_birth("1990-05-01", today=TODAY).valid

    def test_accepts_date_objects(self):
        assert is_valid_date_of_birth(date(1990, 5, 1), today=TODAY).valid

    @pytest.mark.parametrize("value", ["", None, "not-a-date", "1990-13-01", "01/05/1990"])
    def test_unparseable(self, value):
        assert is_valid_date_of_birth(value, today=TODAY).error == "Invalid date format"

    def test_future(self):
        result = is_valid_date_of_birth("2024-06-16", today=TODAY)
        assert result.error == "Date of birth cannot be in the future"

    def test_under_one_year(self):
        result = is_valid_date_of_birth("2024-01-01", today=TODAY)
        assert result.error == "You must be at least 1 year old"

    def test_exactly_one_year(self):
        assert is_valid_date_of_birth("2023-06-15", today=TODAY).valid

    def test_exactly_120_years_is_accepted(self):
        assert is_valid_date_of_birth("1904-06-15", today=TODAY).valid

    def test_older_than_120_years_is_rejected(self):
        result = is_valid_date_of_birth("1904-06-14", today=TODAY)
        assert result.error == "Please enter a valid date of birth"

    def test_leap_day_reference(self):
        """A 29 February reference day still yields a valid boundary."""
        assert is_valid_date_of_birth("2023-02-28", today=date(2024, 2, 29)).valid


class TestGender:
    def test_valid(self):
        assert is_valid_gender("male")
        assert is_valid_gender("female")

    @pytest.mark.parametrize("value", ["", None, "Male", "other"])
    def test_invalid(self, value):
        assert not is_valid_gender(value)


class TestPhone:
    def test_saudi_number(self):
        assert is_valid_phone("+966", "512345678").valid

    def test_formatting_is_stripped(self):
        assert is_valid_phone("+966", "51 234-5678").valid

    def test_unknown_country_code(self):
        assert is_valid_phone("+999", "512345678").error == "Invalid country code"

    def test_wrong_length(self):
        assert is_valid_phone("+966", "5123").error == "Phone number must be 9 digits for +966"

    def test_wrong_pattern(self):
        assert is_valid_phone("+966", "412345678").error == "Invalid phone number format for +966"

    def test_us_number(self):
        assert is_valid_phone("+1", "(555) 123-4567").valid

    def test_find_phone_rule(self):
        assert find_phone_rule("+44").length == 10
        assert find_phone_rule("+0") is None

    def test_normalize_phone(self):
        assert normalize_phone("+966", "51 234 5678") == "+966512345678"

    def test_international_phone(self):
        assert is_valid_international_phone("+966512345678")
        assert not is_valid_international_phone("512345678")
        assert not is_valid_international_phone("+0512345678")
        assert not is_valid_international_phone(None)


class TestSanitizeInput:
    def test_trims(self):
        assert sanitize_input("  Jane  ") == "Jane"

    def test_strips_markup_characters(self):
        assert sanitize_input("<script>alert('x')</script>") == "scriptalertx/script"

    def test_strips_javascript_scheme(self):
        assert sanitize_input("JavaScript:doEvil") == "doEvil"

    def test_strips_event_handlers(self):
        assert sanitize_input("img onerror=boom") == "img boom"

    def test_empty(self):
        assert sanitize_input("") == ""
        assert sanitize_input(None) == ""

    def test_does_not_mutate_plain_text(self):
        assert sanitize_input("Jane Doe") == "Jane Doe"


class TestHelpers:
    def test_passwords_match(self):
        assert do_passwords_match("Secret1!", "Secret1!")
        assert not do_passwords_match("Secret1!", "secret1!")

    def test_mask_email(self):
        assert mask_email("janedoe@example.com") == "jan***@example.com"
        assert mask_email("ab@example.com") == "a***@example.com"
        assert mask_email("not-an-email") == "not-an-email"

    def test_http_url(self):
        assert is_valid_http_url("https://cdn.example.com/a.png")
        assert is_valid_http_url("http://example.com")
        assert not is_valid_http_url("javascript:alert(1)")
        assert not is_valid_http_url(None)
