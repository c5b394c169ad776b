# crmhub/services/authenticator.py
"""Credential checks, registration and password changes.

Session issuing itself lives in ``crmhub.utils.security``; the functions here
only decide *whether* a user may be signed in.
"""
import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crmhub.config.settings import Settings
from crmhub.core.exceptions import (
    AccountInactive,
    EmailAlreadyRegistered,
    InvalidCredentials,
    ValidationError,
)
from crmhub.models.user import User, UserRole, UserStatus
from crmhub.services.activity import log_activity
from crmhub.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt refuses longer secrets
MAX_PASSWORD_BYTES = 72


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_password_length(password: str, label: str = "Password") -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"{label} must be at most {MAX_PASSWORD_BYTES} bytes")


def authenticate(db: Session, settings: Settings, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        logger.info("Login failed for %s: unknown email", email)
        raise InvalidCredentials()

    # Inactive accounts are refused before the password is even looked at
    if user.status != UserStatus.ACTIVE.value:
        logger.info("Login refused for inactive user %s", user.id)
        raise AccountInactive("Account is inactive. Please contact administrator.")

    if not user.hashed_password:
        if settings.passwordless_login_enabled:
            logger.warning("Passwordless development login for user %s (%s)", user.id, user.email)
            return user
        logger.info("Login failed for user %s: no password set", user.id)
        raise InvalidCredentials("Password not set. Please contact administrator.")

    if not verify_password(password or "", user.hashed_password):
        logger.info("Login failed for user %s: bad password", user.id)
        raise InvalidCredentials()

    return user


def register(
    db: Session,
    settings: Settings,
    email: Optional[str],
    password: Optional[str],
    first_name: Optional[str],
    last_name: Optional[str],
) -> User:
    if any(_blank(value) for value in (email, password, first_name, last_name)):
        raise ValidationError("All fields are required")

    _check_password_length(password)

    # Emails are matched exactly as sent
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Invalid email address")

    if db.query(User.id).filter(User.email == email).first():
        raise EmailAlreadyRegistered()

    # Self-service accounts are always employees
    user = User(
        email=email,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        hashed_password=hash_password(password, settings.bcrypt_rounds),
        role=UserRole.EMPLOYEE.value,
        status=UserStatus.ACTIVE.value,
    )
    db.add(user)

    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise EmailAlreadyRegistered()

    log_activity(
        db,
        actor_id=user.id,
        activity_type="registered",
        entity_type="user",
        entity_id=user.id,
        description=f"{user.name} registered",
    )
    db.commit()
    db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


def change_password(
    db: Session,
    settings: Settings,
    user: User,
    current_password: Optional[str],
    new_password: Optional[str],
) -> None:
    if _blank(current_password) or _blank(new_password):
        raise ValidationError("Current and new password are required")

    _check_password_length(new_password, "New password")

    if user.hashed_password and not verify_password(current_password, user.hashed_password):
        raise InvalidCredentials("Current password is incorrect")

    user.hashed_password = hash_password(new_password, settings.bcrypt_rounds)
    log_activity(
        db,
        actor_id=user.id,
        activity_type="password_changed",
        entity_type="user",
        entity_id=user.id,
        description=f"{user.name} changed their password",
    )
    db.commit()
    logger.info("Password changed for user %s", user.id)
