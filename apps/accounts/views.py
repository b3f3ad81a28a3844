from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction
from django.urls import reverse
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from .mails import send_activation_email, send_creation_email, send_password_reset_email
from .models import Account
from .permissions import HasAdminAuthority, HasAdminAuthorityOrReadOnly
from .security import ANONYMOUS_USER, get_current_login
from .serializers import (
    AccountUpdateSerializer,
    PasswordChangeSerializer,
    PasswordResetFinishSerializer,
    PasswordResetRequestSerializer,
    UserLoginSerializer,
    UserProfileSerializer,
    UserRegistrationSerializer,
)
from .services import (
    UserProfile,
    activate_registration,
    change_password as change_account_password,
    complete_password_reset,
    create_user,
    delete_user,
    get_all_managed_users,
    get_authorities,
    get_current_user,
    get_user_by_login,
    register_user,
    request_password_reset,
    update_current_user,
    update_user,
)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserProfileSerializer()
    tokens = TokensResponseSerializer()


class RegistrationResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserProfileSerializer()


class UserPageResponseSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    page = serializers.IntegerField()
    num_pages = serializers.IntegerField()
    results = UserProfileSerializer(many=True)


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


def _profile_data(account):
    return UserProfileSerializer(UserProfile.from_account(account)).data


def _conflict(*, login=None, email=None, account_id=None):
    """Return an error message if login or email belongs to another account."""
    if login is not None:
        # Reserved for unauthenticated requests
        if Account.normalize_login(login) == ANONYMOUS_USER:
            return 'Login name already used'
        owner = Account.objects.find_by_login(login)
        if owner is not None and owner.id != account_id:
            return 'Login name already used'
    if email is not None:
        owner = Account.objects.find_by_email(email)
        if owner is not None and owner.id != account_id:
            return 'Email is already in use'
    return None


def _reset_finish_url(request):
    return request.build_absolute_uri(reverse('accounts:reset-password-finish'))


# =============================================================================
# Registration & authentication
# =============================================================================

@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: RegistrationResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new account. The activation link is mailed to the account's email; "
                "the account must be activated before it can log in.",
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    error = _conflict(login=data['login'], email=data['email'])
    if error:
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    try:
        account = register_user(**data)
    except IntegrityError:
        return Response(
            {'error': 'Login name or email already used'},
            status=status.HTTP_400_BAD_REQUEST
        )

    activation_url = request.build_absolute_uri(reverse('accounts:activate'))
    transaction.on_commit(lambda: send_activation_email(account, activation_url))

    return Response({
        'message': 'Registration successful. Please activate your account.',
        'user': _profile_data(account),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[OpenApiParameter('key', OpenApiTypes.STR, OpenApiParameter.QUERY, required=True)],
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Activate a registered account with its activation key.",
    tags=['account'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def activate_account(request):
    """Activate a registered account."""
    account = activate_registration(key=request.query_params.get('key', ''))

    if account is None:
        return Response({
            'error': 'Invalid activation key'
        }, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Account activated'
    })


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Authenticate with login and password to receive JWT tokens.",
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with login name and password."""
    serializer = UserLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # Not activated accounts are rejected by the auth backend
    user = authenticate(
        request,
        username=serializer.validated_data['login'],
        password=serializer.validated_data['password'],
    )

    if user is None:
        return Response({
            'error': 'Invalid credentials'
        }, status=status.HTTP_401_UNAUTHORIZED)

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    refresh = RefreshToken.for_user(user)

    return Response({
        'message': 'Login successful',
        'user': _profile_data(user),
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    })


# =============================================================================
# Current account
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: UserProfileSerializer, 404: ErrorResponseSerializer},
    description="Get the current account.",
    tags=['account'],
)
@extend_schema(
    methods=['POST'],
    request=AccountUpdateSerializer,
    responses={200: UserProfileSerializer, 400: ErrorResponseSerializer},
    description="Update the current account's names, email, language and image.",
    tags=['account'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def account(request):
    """Get or update the current account."""
    current_login = get_current_login(request)

    if request.method == 'POST':
        serializer = AccountUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        current = get_current_user(current_login=current_login)
        error = _conflict(
            email=serializer.validated_data['email'],
            account_id=current.id if current else None,
        )
        if error:
            return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

        update_current_user(current_login=current_login, **serializer.validated_data)

    current = get_current_user(current_login=current_login)
    if current is None:
        return Response({
            'error': 'User could not be found'
        }, status=status.HTTP_404_NOT_FOUND)

    return Response(_profile_data(current))


@extend_schema(
    request=PasswordChangeSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    description="Change the current account's password.",
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Change the current account's password."""
    serializer = PasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    change_account_password(
        current_login=get_current_login(request),
        new_password=serializer.validated_data['new_password'],
    )

    return Response({
        'message': 'Password changed'
    })


# =============================================================================
# Password reset
# =============================================================================

@extend_schema(
    request=PasswordResetRequestSerializer,
    responses={200: MessageResponseSerializer},
    description="Mail a password reset key to an activated account. Always returns success.",
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password_init(request):
    """Request a password reset key."""
    serializer = PasswordResetRequestSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # The response never reveals whether the account exists
    account = request_password_reset(email=serializer.validated_data['email'])
    if account is not None:
        reset_finish_url = _reset_finish_url(request)
        transaction.on_commit(lambda: send_password_reset_email(account, reset_finish_url))

    return Response({
        'message': 'If the account exists, a password reset key has been sent'
    })


@extend_schema(
    request=PasswordResetFinishSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Set a new password with a reset key.",
    tags=['account'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def reset_password_finish(request):
    """Complete password reset with a key."""
    serializer = PasswordResetFinishSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    account = complete_password_reset(
        new_password=serializer.validated_data['new_password'],
        key=serializer.validated_data['key'],
    )

    if account is None:
        return Response({
            'error': 'Invalid or expired reset key'
        }, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Password reset successful'
    })


# =============================================================================
# User administration
# =============================================================================

def _page_size(value):
    try:
        size = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    return max(1, min(size, MAX_PAGE_SIZE))


@extend_schema(
    methods=['GET'],
    parameters=[
        OpenApiParameter('page', OpenApiTypes.INT, OpenApiParameter.QUERY),
        OpenApiParameter('size', OpenApiTypes.INT, OpenApiParameter.QUERY),
    ],
    responses={200: UserPageResponseSerializer},
    description="List managed users, one page at a time.",
    tags=['users'],
)
@extend_schema(
    methods=['POST'],
    request=UserProfileSerializer,
    responses={201: UserProfileSerializer, 400: ErrorResponseSerializer},
    description="Create an activated user. A reset key is mailed to the owner, "
                "who sets a password through the reset flow.",
    tags=['users'],
)
@extend_schema(
    methods=['PUT'],
    request=UserProfileSerializer,
    responses={200: UserProfileSerializer, 400: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Replace every editable field of an existing user.",
    tags=['users'],
)
@api_view(['GET', 'POST', 'PUT'])
@permission_classes([HasAdminAuthority])
def users(request):
    """List, create or update users."""
    if request.method == 'GET':
        page = get_all_managed_users(
            page=request.query_params.get('page', 1),
            page_size=_page_size(request.query_params.get('size')),
        )
        return Response({
            'count': page.paginator.count,
            'page': page.number,
            'num_pages': page.paginator.num_pages,
            'results': UserProfileSerializer(page.object_list, many=True).data,
        })

    serializer = UserProfileSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    profile = serializer.to_profile()

    if request.method == 'POST':
        if profile.id is not None:
            return Response({
                'error': 'A new user cannot already have an ID'
            }, status=status.HTTP_400_BAD_REQUEST)

        error = _conflict(login=profile.login, email=profile.email)
        if error:
            return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

        try:
            account = create_user(profile=profile)
        except IntegrityError:
            return Response(
                {'error': 'Login name or email already used'},
                status=status.HTTP_400_BAD_REQUEST
            )

        reset_finish_url = _reset_finish_url(request)
        transaction.on_commit(lambda: send_creation_email(account, reset_finish_url))
        return Response(_profile_data(account), status=status.HTTP_201_CREATED)

    error = _conflict(login=profile.login, email=profile.email, account_id=profile.id)
    if error:
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    try:
        updated = update_user(profile=profile)
    except IntegrityError:
        return Response(
            {'error': 'Login name or email already used'},
            status=status.HTTP_400_BAD_REQUEST
        )
    if updated is None:
        return Response({
            'error': 'User not found'
        }, status=status.HTTP_404_NOT_FOUND)

    return Response(UserProfileSerializer(updated).data)


@extend_schema(
    responses={200: OpenApiTypes.OBJECT},
    description="List the names of all authorities.",
    tags=['users'],
)
@api_view(['GET'])
@permission_classes([HasAdminAuthority])
def authorities(request):
    """List authority names."""
    return Response(get_authorities())


@extend_schema(
    methods=['GET'],
    responses={200: UserProfileSerializer, 404: ErrorResponseSerializer},
    description="Get a user by login.",
    tags=['users'],
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None},
    description="Delete a user by login.",
    tags=['users'],
)
@api_view(['GET', 'DELETE'])
@permission_classes([HasAdminAuthorityOrReadOnly])
def user_detail(request, login):
    """Get or delete a user."""
    if request.method == 'DELETE':
        delete_user(login=login)
        return Response(status=status.HTTP_204_NO_CONTENT)

    account = get_user_by_login(login=login)
    if account is None:
        return Response({
            'error': 'User not found'
        }, status=status.HTTP_404_NOT_FOUND)

    return Response(_profile_data(account))
