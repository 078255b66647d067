"""
Signup, email verification and login at the service layer.
"""

from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from agriloop import accounts, models, schemas, security
from agriloop.errors import AuthError, DuplicateError, MailDeliveryError, NotFoundError, TransientStoreError, ValidationError


def _signup_data(**overrides):
    data = {
        "username": "ravi",
        "full_name": "Ravi Kumar",
        "email": "Ravi@Example.com",
        "role": "Seller",
        "password": "secret123",
        "city": "Pune",
    }
    data.update(overrides)
    return schemas.SignupIn(**data)


def test_signup_creates_unverified_user_and_mails_link(db, mailer):
    user = accounts.signup(db, _signup_data(), mailer)
    assert user.verified is False
    assert user.email == "ravi@example.com"
    assert user.role == models.RoleEnum.seller
    assert user.password_hash != "secret123"
    assert security.check_password("secret123", user.password_hash)

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "ravi@example.com"
    assert "/api/verify-email?token=" in mailer.sent[0]["html"]


@pytest.mark.parametrize("missing", ["username", "full_name", "email", "role", "password"])
def test_signup_requires_fields(db, mailer, missing):
    with pytest.raises(ValidationError):
        accounts.signup(db, _signup_data(**{missing: None}), mailer)
    assert mailer.sent == []


def test_signup_rejects_unknown_role_and_gender(db, mailer):
    with pytest.raises(ValidationError):
        accounts.signup(db, _signup_data(role="Admin"), mailer)
    with pytest.raises(ValidationError):
        accounts.signup(db, _signup_data(gender="Unknown"), mailer)


def test_duplicate_email_and_username(db, mailer):
    accounts.signup(db, _signup_data(), mailer)
    with pytest.raises(DuplicateError) as exc:
        accounts.signup(db, _signup_data(username="other"), mailer)
    assert exc.value.message == "Email already exists"
    with pytest.raises(DuplicateError) as exc:
        accounts.signup(db, _signup_data(email="new@example.com"), mailer)
    assert exc.value.message == "Username already exists"
    assert db.query(models.User).count() == 1


def test_mail_failure_rolls_back_signup(db, mailer):
    mailer.fail = True
    with pytest.raises(MailDeliveryError):
        accounts.signup(db, _signup_data(), mailer)
    assert db.query(models.User).count() == 0

    mailer.fail = False
    accounts.signup(db, _signup_data(), mailer)
    assert db.query(models.User).count() == 1


def test_verify_email_flips_once(db, mailer):
    user = accounts.signup(db, _signup_data(), mailer)
    token = security.make_verification_token(user.email)
    assert accounts.verify_email(db, token) is True
    assert accounts.verify_email(db, token) is False
    db.refresh(user)
    assert user.verified is True


def test_verify_email_bad_tokens(db):
    with pytest.raises(AuthError):
        accounts.verify_email(db, "not-a-token")
    with pytest.raises(NotFoundError):
        accounts.verify_email(db, security.make_verification_token("ghost@example.com"))


def test_login(db, make_user):
    user = make_user(models.RoleEnum.buyer, email="b@example.com", password="pw12345")
    token, logged_in = accounts.login(db, "b@example.com", "pw12345")
    assert logged_in.id == user.id
    assert security.read_access_token(token) == user.id


def test_login_failures(db, make_user):
    make_user(models.RoleEnum.buyer, email="b@example.com", password="pw12345")
    make_user(models.RoleEnum.buyer, email="u@example.com", password="pw12345", verified=False)

    with pytest.raises(NotFoundError):
        accounts.login(db, "nobody@example.com", "pw12345")
    with pytest.raises(AuthError) as exc:
        accounts.login(db, "u@example.com", "pw12345")
    assert exc.value.status_code == 403
    with pytest.raises(AuthError) as exc:
        accounts.login(db, "b@example.com", "wrong")
    assert exc.value.status_code == 401


def test_no_mail_when_commit_fails(db, mailer):
    with mock.patch.object(db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
        with pytest.raises(TransientStoreError):
            accounts.signup(db, _signup_data(), mailer)
    assert mailer.sent == []
    assert db.query(models.User).count() == 0
