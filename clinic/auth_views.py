"""
Authentication views: login, registration, current user and logout.

Kept apart from :mod:`clinic.authentication` so that DRF can import the
authentication class while loading settings without pulling in views.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny

from clinic.exceptions import ApiError
from clinic.responses import success_response
from clinic.serializers.auth import LoginSerializer, RegisterSerializer
from clinic.services.accounts import check_credentials, issue_token, register_user, user_payload
from clinic.services.audit import log_action


class LoginFailed(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid email or password'
    default_code = 'login_failed'


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_view(request):
    """Email/password login returning ``{user, token}``."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data['email']

    user = check_credentials(email, s.validated_data['password'])
    if user is None:
        log_action(user=None, action='FAILED_LOGIN', table_name='users',
                   detail={'email': email, 'ip': request.META.get('REMOTE_ADDR')})
        raise LoginFailed()

    log_action(user=user, action='LOGIN', table_name='users', record_id=user.pk,
               detail={'ip': request.META.get('REMOTE_ADDR')})
    return success_response({'user': user_payload(user), 'token': issue_token(user)}, 'Login successful')

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = register_user(**s.validated_data)
    log_action(user=user, action='INSERT', table_name='users', record_id=user.pk)
    return success_response(
        {'user': user_payload(user), 'token': issue_token(user)},
        'User registered successfully',
        status=status.HTTP_201_CREATED,
    )

register_view.cls.throttle_scope = 'login'


@api_view(['GET'])
def me_view(request):
    return success_response(user_payload(request.user), 'User retrieved successfully')


@api_view(['POST'])
def logout_view(request):
    """Tokens are stateless; the client drops its copy."""
    return success_response(None, 'Logout successful')
