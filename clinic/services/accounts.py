"""
Staff accounts: credential checks, registration and token issuing.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction
from rest_framework_simplejwt.tokens import AccessToken

from clinic.exceptions import DuplicateEntry
from clinic.fields import flatten, rename_fields_and_timestamps
from clinic.models import Role, User

logger = logging.getLogger(__name__)

DEFAULT_DOCTOR_DEPARTMENT = 'General Medicine'
PRIVATE_USER_FIELDS = ('password', 'username', 'first_name', 'last_name', 'is_staff', 'is_superuser', 'date_joined')


def issue_token(user: User) -> str:
    token = AccessToken.for_user(user)
    token['email'] = user.email
    token['role'] = user.role
    return str(token)


def user_payload(user: User) -> dict:
    """The public view of a user; never carries the password hash."""
    return rename_fields_and_timestamps(flatten(user, exclude=PRIVATE_USER_FIELDS))


def check_credentials(email: str, password: str) -> Optional[User]:
    """The active user owning ``email`` and ``password``, or ``None``."""
    user = User.objects.filter(email__iexact=(email or '').strip()).first()
    if user is None or not user.is_active or not user.check_password(password):
        return None
    return user


def register_user(*, name: str, email: str, password: str, role: str = Role.DOCTOR,
                  department: Optional[str] = None, phone: str = '') -> User:
    """Create a staff account.

    Doctors registered without a department are placed in
    ``General Medicine``; other roles keep no department.
    """
    email = User.objects.normalize_email(email.strip()).lower()
    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateEntry('User with this email already exists')
    if role == Role.DOCTOR and not department:
        department = DEFAULT_DOCTOR_DEPARTMENT
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email, password=password, name=name, role=role,
                department=department or None, phone=phone or '',
            )
    except IntegrityError:
        raise DuplicateEntry('User with this email already exists')
    logger.info('Registered %s account %s', role, user.id)
    return user
