"""
Tests for the Validation Service

Rule tables are evaluated without HTTP; only the unique rule needs the
database session.
"""

import pytest

from library_api.exceptions import ValidationFailed
from library_api.services.validation import (
    BOOK_RULES,
    LOGIN_RULES,
    REGISTER_RULES,
    Rule,
    check_field,
    normalize,
    validate,
)

VALID_BOOK = {
    "title": "Dune",
    "author": "Frank Herbert",
    "summary": "Science-fiction epic on Arrakis.",
    "isbn": "9780441013593",
}


class TestNormalize:
    def test_strings_are_stripped(self):
        values = normalize({"title": "  Dune  "}, BOOK_RULES)

        assert values["title"] == "Dune"

    def test_blank_becomes_missing(self):
        values = normalize({"title": "   ", "author": ""}, BOOK_RULES)

        assert values["title"] is None
        assert values["author"] is None

    def test_password_kept_verbatim(self):
        values = normalize({"password": "  secret  "}, REGISTER_RULES)

        assert values["password"] == "  secret  "

    def test_unknown_fields_dropped(self):
        values = normalize({"title": "Dune", "id": 7}, BOOK_RULES)

        assert "id" not in values


class TestCheckField:
    def test_missing_reports_only_required(self):
        messages = check_field("title", None, BOOK_RULES["title"])

        assert messages == ["The title field is required."]

    def test_optional_missing_is_fine(self):
        assert check_field("nickname", None, [Rule("string"), Rule("max", 10)]) == []

    def test_type_failure_stops_the_chain(self):
        messages = check_field("title", ["a", "b"], BOOK_RULES["title"])

        assert messages == ["The title field must be a string."]

    def test_multiple_length_rules(self):
        rules = [Rule("string"), Rule("min", 5), Rule("size", 6)]

        assert check_field("code", "abc", rules) == [
            "The code field must be at least 5 characters.",
            "The code field must be 6 characters.",
        ]

    def test_underscores_read_as_spaces(self):
        messages = check_field("first_name", None, [Rule("required")])

        assert messages == ["The first name field is required."]

    def test_unique_skipped_when_other_rules_fail(self, db_session, sample_book):
        """A malformed ISBN is not also reported as taken."""
        messages = check_field("isbn", "123", BOOK_RULES["isbn"], db=db_session)

        assert messages == ["The isbn field must be 13 characters."]

    def test_unique_without_session_is_an_error(self):
        with pytest.raises(RuntimeError):
            check_field("isbn", "9780441013593", BOOK_RULES["isbn"])


class TestValidate:
    def test_valid_book(self, db_session):
        assert validate(VALID_BOOK, BOOK_RULES, db=db_session) == VALID_BOOK

    def test_none_payload(self, db_session):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(None, BOOK_RULES, db=db_session)

        assert len(exc_info.value.errors) == 4

    def test_all_errors_collected(self, db_session):
        with pytest.raises(ValidationFailed) as exc_info:
            validate({"title": "ab", "isbn": "1"}, BOOK_RULES, db=db_session)

        errors = exc_info.value.errors
        assert list(errors) == ["title", "author", "summary", "isbn"]
        assert exc_info.value.message == (
            "The title field must be at least 3 characters. (and 3 more errors)"
        )

    def test_isbn_taken(self, db_session, sample_book):
        payload = {**VALID_BOOK, "isbn": sample_book.isbn}

        with pytest.raises(ValidationFailed) as exc_info:
            validate(payload, BOOK_RULES, db=db_session)

        assert exc_info.value.errors == {"isbn": ["The isbn has already been taken."]}

    def test_isbn_of_record_being_updated(self, db_session, sample_book):
        payload = {**VALID_BOOK, "isbn": sample_book.isbn}

        fields = validate(payload, BOOK_RULES, db=db_session, ignore_id=sample_book.id)

        assert fields["isbn"] == sample_book.isbn

    def test_email_taken(self, db_session, sample_user):
        payload = {"name": "John", "email": sample_user.email, "password": "password123"}

        with pytest.raises(ValidationFailed) as exc_info:
            validate(payload, REGISTER_RULES, db=db_session)

        assert exc_info.value.errors == {"email": ["The email has already been taken."]}

    @pytest.mark.parametrize("email", ["john", "john@", "@example.com", "john doe@example.com"])
    def test_invalid_emails(self, email):
        with pytest.raises(ValidationFailed) as exc_info:
            validate({"email": email, "password": "x"}, LOGIN_RULES)

        assert exc_info.value.errors == {
            "email": ["The email field must be a valid email address."]
        }

    def test_login_password_has_no_length_rule(self):
        fields = validate({"email": "john@example.com", "password": "x"}, LOGIN_RULES)

        assert fields == {"email": "john@example.com", "password": "x"}


class TestValidationFailedMessage:
    def test_single_error(self):
        exc = ValidationFailed({"isbn": ["The isbn has already been taken."]})

        assert exc.message == "The isbn has already been taken."

    def test_one_more_error(self):
        exc = ValidationFailed({"title": ["First.", "Second."]})

        assert exc.message == "First. (and 1 more error)"

    def test_no_messages(self):
        assert ValidationFailed({}).message == "The given data was invalid."

    def test_to_dict(self):
        errors = {"title": ["The title field is required."]}

        assert ValidationFailed(errors).to_dict() == {
            "message": "The title field is required.",
            "errors": errors,
        }
