"""
Tests for member/admin login, account creation, password change and reset.
"""

from datetime import timedelta

import pytest

from app import crud
from app.core.exceptions import (
    AccountDisabledError,
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    ValidationError,
)
from app.core.security import decode_token, hash_token, utcnow, verify_password
from app.schemas.auth import CreateAccountRequest
from app.services.account_service import RESET_REQUESTED_MESSAGE, account_service


@pytest.fixture
def member_login(db, make_member):
    """A member with an active credential (password: 'member-pass')."""
    member = make_member("NAUS-2022001", "m@x.com", has_account=True)
    user = crud.user.create(db, obj_in={
        "email": "m@x.com",
        "membership_number": member.membership_number,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "password": "member-pass",
    })
    return user


class TestLogin:

    def test_member_login_counts(self, db, member_login) -> None:
        token = account_service.login_member(db, email="m@x.com", password="member-pass")

        payload = decode_token(token.access_token)
        assert payload["sub"] == "m@x.com"
        assert payload["type"] == "member"
        assert payload["membership_number"] == "NAUS-2022001"
        assert token.must_change_password is True
        assert crud.user.get_by_email(db, email="m@x.com").login_count == 1

        token = account_service.login_member(db, email="M@X.com", password="member-pass")
        assert token.must_change_password is False
        assert crud.user.get_by_email(db, email="m@x.com").login_count == 2

    def test_wrong_password(self, db, member_login) -> None:
        with pytest.raises(AuthenticationError):
            account_service.login_member(db, email="m@x.com", password="nope")
        assert crud.user.get_by_email(db, email="m@x.com").login_count == 0

    def test_unknown_email_same_error(self, db) -> None:
        with pytest.raises(AuthenticationError) as exc:
            account_service.login_member(db, email="nobody@x.com", password="whatever")
        assert exc.value.message == "Invalid email or password"

    def test_inactive_account(self, db, member_login) -> None:
        crud.user.update(db, db_obj=member_login, obj_in={"is_active": False})
        with pytest.raises(AccountDisabledError):
            account_service.login_member(db, email="m@x.com", password="member-pass")

    def test_admin_login(self, db, admin) -> None:
        token = account_service.login_admin(db, email="admin@naus.org", password="admin-secret-1")

        payload = decode_token(token.access_token)
        assert payload["type"] == "admin"
        assert payload["role"] == "membership_admin"
        assert crud.admin.get(db, id=admin.id).login_count == 1


class TestCreateAccount:

    def request(self, **overrides) -> CreateAccountRequest:
        data = {
            "membership_number": "NAUS-2018003",
            "email": "legacy@x.com",
            "password": "brand-new-pass",
            "first_name": "Legacy",
            "last_name": "Member",
        }
        data.update(overrides)
        return CreateAccountRequest(**data)

    def test_creates_credential_and_flags_member(self, db, make_member) -> None:
        make_member("NAUS-2018003", "legacy@x.com")

        user = account_service.create_account(db, request=self.request())

        assert user.membership_number == "NAUS-2018003"
        assert verify_password("brand-new-pass", user.hashed_password)
        member = crud.member.get_by_membership_number(db, membership_number="NAUS-2018003")
        assert member.has_account is True
        assert member.account_created is not None

    def test_unknown_number(self, db) -> None:
        with pytest.raises(ValidationError) as exc:
            account_service.create_account(db, request=self.request())
        assert "membership_number" in exc.value.errors

    def test_member_already_has_account(self, db, make_member) -> None:
        make_member("NAUS-2018003", "legacy@x.com", has_account=True)
        with pytest.raises(ConflictError):
            account_service.create_account(db, request=self.request())

    def test_email_must_match_member(self, db, make_member) -> None:
        make_member("NAUS-2018003", "legacy@x.com")
        with pytest.raises(ValidationError):
            account_service.create_account(db, request=self.request(email="other@x.com"))


class TestChangePassword:

    def test_changes_and_confirms(self, db, member_login, sent_emails) -> None:
        email_sent = account_service.change_password(
            db, principal=member_login, current_password="member-pass", new_password="another-pass"
        )

        assert email_sent is True
        assert verify_password("another-pass", crud.user.get_by_email(db, email="m@x.com").hashed_password)
        assert sent_emails.subjects() == ["Password Changed Successfully"]

    def test_wrong_current_password(self, db, member_login) -> None:
        with pytest.raises(ValidationError):
            account_service.change_password(
                db, principal=member_login, current_password="bad", new_password="another-pass"
            )


class TestPasswordReset:
    """Emailed, hashed, single-use, one-hour reset tokens."""

    def test_same_response_for_known_and_unknown(self, db, member_login, sent_emails) -> None:
        known = account_service.request_password_reset(db, email="m@x.com")
        unknown = account_service.request_password_reset(db, email="nobody@x.com")

        assert known == unknown == RESET_REQUESTED_MESSAGE
        assert len(sent_emails.to("m@x.com")) == 1
        assert sent_emails.to("nobody@x.com") == []

    def test_only_hash_is_stored(self, db, member_login, sent_emails) -> None:
        account_service.request_password_reset(db, email="m@x.com")
        token = sent_emails.reset_token_for("m@x.com")

        user = crud.user.get_by_email(db, email="m@x.com")
        assert user.reset_password_token == hash_token(token)
        assert user.reset_password_token != token

    def test_reset_with_token(self, db, member_login, sent_emails) -> None:
        account_service.request_password_reset(db, email="m@x.com")
        token = sent_emails.reset_token_for("m@x.com")

        assert account_service.verify_reset_token(db, token=token) is True
        assert account_service.reset_password(db, token=token, new_password="reset-pass") is True

        user = crud.user.get_by_email(db, email="m@x.com")
        assert verify_password("reset-pass", user.hashed_password)
        assert user.reset_password_token is None
        assert "Password Changed Successfully" in sent_emails.subjects()

    def test_token_cannot_be_reused(self, db, member_login, sent_emails) -> None:
        account_service.request_password_reset(db, email="m@x.com")
        token = sent_emails.reset_token_for("m@x.com")
        account_service.reset_password(db, token=token, new_password="reset-pass")

        with pytest.raises(InvalidTokenError):
            account_service.reset_password(db, token=token, new_password="again-pass")
        assert account_service.verify_reset_token(db, token=token) is False

    def test_expired_token_rejected(self, db, member_login, sent_emails) -> None:
        account_service.request_password_reset(db, email="m@x.com")
        token = sent_emails.reset_token_for("m@x.com")
        user = crud.user.get_by_email(db, email="m@x.com")
        user.reset_password_expires = utcnow() - timedelta(minutes=61)
        db.commit()

        with pytest.raises(InvalidTokenError):
            account_service.reset_password(db, token=token, new_password="reset-pass")
        assert verify_password("member-pass", crud.user.get_by_email(db, email="m@x.com").hashed_password)

    def test_new_request_replaces_old_token(self, db, member_login, sent_emails) -> None:
        account_service.request_password_reset(db, email="m@x.com")
        first = sent_emails.reset_token_for("m@x.com")
        account_service.request_password_reset(db, email="m@x.com")
        second = sent_emails.reset_token_for("m@x.com")

        assert first != second
        assert account_service.verify_reset_token(db, token=first) is False
        assert account_service.verify_reset_token(db, token=second) is True

    def test_admin_reset_uses_admin_table(self, db, admin, sent_emails) -> None:
        account_service.request_password_reset(db, email="admin@naus.org", admin=True)
        html = sent_emails.to("admin@naus.org")[0]["html"]
        assert "/admin/reset-password/" in html
        token = sent_emails.reset_token_for("admin@naus.org")

        # Admin tokens are not valid for member accounts
        with pytest.raises(InvalidTokenError):
            account_service.reset_password(db, token=token, new_password="whatever-1")

        account_service.reset_password(db, token=token, new_password="admin-new-pass", admin=True)
        assert verify_password("admin-new-pass", crud.admin.get(db, id=admin.id).hashed_password)
