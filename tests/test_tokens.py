"""
Tests for the Token Service

Issue, authenticate and revoke opaque bearer tokens directly against the
database session.
"""

import pytest

from library_api.exceptions import Unauthenticated
from library_api.models import PersonalAccessToken
from library_api.services.tokens import (
    authenticate_token,
    generate_secret,
    hash_secret,
    issue_token,
    revoke_token,
)


class TestGenerateSecret:
    def test_secret_is_40_hex_characters(self):
        secret, secret_hash = generate_secret()

        assert len(secret) == 40
        int(secret, 16)
        assert secret_hash == hash_secret(secret)

    def test_secrets_are_unique(self):
        secrets = {generate_secret()[0] for _ in range(50)}

        assert len(secrets) == 50


class TestIssueToken:
    def test_issue_token_format(self, db_session, sample_user):
        plain, record = issue_token(db_session, sample_user)

        token_id, _, secret = plain.partition("|")
        assert token_id == str(record.id)
        assert record.token_hash == hash_secret(secret)
        assert record.name == "api-token"
        assert record.last_used_at is None

    def test_issue_token_custom_name(self, db_session, sample_user):
        _, record = issue_token(db_session, sample_user, name="cli")

        assert record.name == "cli"
        assert record in sample_user.tokens


class TestAuthenticateToken:
    def test_authenticate_valid_token(self, db_session, sample_user):
        plain, record = issue_token(db_session, sample_user)

        token = authenticate_token(db_session, plain)

        assert token.id == record.id
        assert token.user.email == sample_user.email
        assert token.last_used_at is not None

    def test_authenticate_bare_secret(self, db_session, sample_user):
        """The secret alone is looked up by its hash."""
        plain, record = issue_token(db_session, sample_user)
        secret = plain.split("|", 1)[1]

        assert authenticate_token(db_session, secret).id == record.id

    def test_authenticate_wrong_secret(self, db_session, sample_user):
        plain, record = issue_token(db_session, sample_user)

        with pytest.raises(Unauthenticated):
            authenticate_token(db_session, f"{record.id}|{'0' * 40}")

    def test_authenticate_secret_of_other_token(self, db_session, sample_user):
        """A valid secret paired with a different id is rejected."""
        first_plain, _ = issue_token(db_session, sample_user)
        _, second = issue_token(db_session, sample_user)
        secret = first_plain.split("|", 1)[1]

        with pytest.raises(Unauthenticated):
            authenticate_token(db_session, f"{second.id}|{secret}")

    @pytest.mark.parametrize(
        "presented",
        [
            "",
            None,
            "abc|secret",
            "1|",
            "|secret",
            "²|secret",
            "99999999999999999999999|secret",
            f"{2**31}|secret",
        ],
    )
    def test_authenticate_malformed(self, db_session, sample_user, presented):
        issue_token(db_session, sample_user)

        with pytest.raises(Unauthenticated) as exc_info:
            authenticate_token(db_session, presented)

        assert exc_info.value.message == "Unauthenticated."


class TestRevokeToken:
    def test_revoked_token_rejected(self, db_session, sample_user):
        plain, record = issue_token(db_session, sample_user)

        revoke_token(db_session, record)

        assert db_session.query(PersonalAccessToken).count() == 0
        with pytest.raises(Unauthenticated):
            authenticate_token(db_session, plain)

    def test_revoke_leaves_other_tokens(self, db_session, sample_user):
        _, first = issue_token(db_session, sample_user)
        second_plain, _ = issue_token(db_session, sample_user)

        revoke_token(db_session, first)

        assert authenticate_token(db_session, second_plain) is not None
