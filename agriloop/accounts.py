"""Signup, email verification and login."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas, security, mailer as mail
from .database import atomic
from .errors import AuthError, DuplicateError, MailDeliveryError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_SIGNUP_FIELDS = ("username", "full_name", "email", "role", "password")


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def _check_duplicates(db: Session, username: str, email: str):
    if get_user_by_email(db, email) is not None:
        raise DuplicateError("Email already exists")
    if db.query(models.User.id).filter(models.User.username == username).first() is not None:
        raise DuplicateError("Username already exists")


def signup(db: Session, data: schemas.SignupIn, mailer) -> models.User:
    """Create an unverified user and mail them a verification link.

    The user row is committed before the mail goes out and deleted again if
    the mail can not be sent, so a retry with the same email is possible.
    """
    missing = [f for f in REQUIRED_SIGNUP_FIELDS if not getattr(data, f)]
    if missing:
        raise ValidationError(
            "Missing required fields: username, full_name, email, role, and password are required"
        )
    roles = [r.value for r in models.RoleEnum]
    if data.role not in roles:
        raise ValidationError('Role must be either "Seller" or "Buyer"')
    if data.gender and data.gender not in [g.value for g in models.GenderEnum]:
        raise ValidationError('Gender must be "Male", "Female", or "Other"')

    email = data.email.strip().lower()
    username = data.username.strip()

    with atomic(db):
        _check_duplicates(db, username, email)
        user = models.User(
            username=username,
            full_name=data.full_name,
            email=email,
            password_hash=security.hash_password(data.password),
            role=models.RoleEnum(data.role),
            gender=models.GenderEnum(data.gender) if data.gender else None,
            date_of_birth=data.date_of_birth,
            city=data.city or None,
            verified=False,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError as e:
            # lost a race with a concurrent signup
            msg = str(e.orig).lower()
            if "email" in msg:
                raise DuplicateError("Email already exists") from e
            raise DuplicateError("Username already exists") from e

    # mail only goes out for a committed account
    link = mail.verification_link(security.make_verification_token(email))
    try:
        mailer.send(email, "Verify your email - AgriLoop", mail.verification_email(user.full_name, link))
    except MailDeliveryError:
        with atomic(db):
            db.delete(user)
        raise

    db.refresh(user)
    logger.info("User %s signed up as %s", user.id, user.role.value)
    return user


def verify_email(db: Session, token: str) -> bool:
    """Redeem a verification token.

    Returns True when this call flipped the user to verified, False when they
    already were.
    """
    email = security.read_verification_token(token)
    with atomic(db):
        user = get_user_by_email(db, email)
        if user is None:
            raise NotFoundError("User not found")
        if user.verified:
            return False
        user.verified = True
    logger.info("User %s verified their email", user.id)
    return True


def login(db: Session, email: str, password: str):
    """Return ``(token, user)`` for valid, verified credentials."""
    user = get_user_by_email(db, (email or "").strip().lower())
    if user is None:
        raise NotFoundError("User not found.")
    if not user.verified:
        raise AuthError("Email not verified. Please verify your email to log in.", status_code=403)
    if not security.check_password(password, user.password_hash):
        raise AuthError("Incorrect password.", status_code=401)
    return security.make_access_token(user.id), user


def mark_verified(db: Session, email: str) -> models.User:
    """Admin override used by the CLI."""
    with atomic(db):
        user = get_user_by_email(db, email.strip().lower())
        if user is None:
            raise NotFoundError("User not found")
        user.verified = True
    return user
