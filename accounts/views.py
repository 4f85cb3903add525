"""
Authentication views
"""
import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import User
from core.responses import ok, created
from .serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def _token_for(user):
    return str(RefreshToken.for_user(user).access_token)


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """
    POST /api/auth/register
    Body: {email, password, name, role?}
    Only an authenticated admin may choose the role; everyone else is registered as AGENT.
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    caller = request.user
    if not (caller and caller.is_authenticated and caller.role == User.ROLE_ADMIN):
        serializer.validated_data['role'] = User.ROLE_AGENT
    user = serializer.save()
    logger.info('[AUTH] registered user_id=%s role=%s', user.id, user.role)
    return created(
        {'token': _token_for(user), 'user': UserSerializer(user).data},
        message='User registered successfully',
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    POST /api/auth/login
    Returns: {token, user}
    400 for a malformed body, 401 for bad credentials or a deactivated account.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.validated_data['user']
    return ok(
        {'token': _token_for(user), 'user': UserSerializer(user).data},
        message='Login successful',
    )


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    """
    GET /api/auth/profile - current user
    PUT /api/auth/profile - update name/email
    """
    if request.method == 'GET':
        return ok(UserSerializer(request.user).data)

    serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    return ok(UserSerializer(user).data, message='Profile updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    """
    POST /api/auth/change-password
    Body: { currentPassword, newPassword }
    """
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    user = request.user
    user.set_password(serializer.validated_data['newPassword'])
    user.save(update_fields=['password', 'updated_at'])
    logger.info('[AUTH] password changed user_id=%s', user.id)
    return ok(message='Password changed successfully')
