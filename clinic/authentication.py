"""
Bearer-token authentication for the API.

Tokens are issued by :func:`clinic.services.accounts.issue_token` through
simplejwt and verified here with PyJWT directly, so an expired token can
be told apart from one that is malformed or badly signed.  Kept apart from
any view module so DRF can import it while loading settings.
"""
from __future__ import annotations

import logging

import jwt
from django.conf import settings
from rest_framework import authentication

from .exceptions import InvalidCredential
from .models import User

logger = logging.getLogger(__name__)


def decode_token(token: str) -> dict:
    """Verify signature and expiry; raise :class:`InvalidCredential` otherwise."""
    conf = settings.SIMPLE_JWT
    try:
        return jwt.decode(token, conf['SIGNING_KEY'], algorithms=[conf['ALGORITHM']])
    except jwt.ExpiredSignatureError:
        raise InvalidCredential('Token expired')
    except jwt.InvalidTokenError:
        raise InvalidCredential('Invalid token')


class BearerTokenAuthentication(authentication.BaseAuthentication):
    """``Authorization: Bearer <jwt>``.

    No header (or a different scheme) means anonymous; the permission
    layer then answers 401 "Authentication required".
    """
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).decode('latin-1')
        if not header.startswith(f'{self.keyword} '):
            return None
        token = header[len(self.keyword) + 1:].strip()
        if not token:
            return None

        payload = decode_token(token)
        user_id = payload.get(settings.SIMPLE_JWT['USER_ID_CLAIM'])
        user = User.objects.filter(pk=user_id, is_active=True).first() if user_id else None
        if user is None:
            logger.info('Rejected token for unknown or inactive user %s', user_id)
            raise InvalidCredential('Invalid token')
        return user, payload

    def authenticate_header(self, request):
        return self.keyword
