from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.core.exceptions import DomainError
from apps.core.responses import error_response

from .names import generate_random_name
from .serializers import (
    UserSerializer,
    UserMinimalSerializer,
    UserRegistrationSerializer,
    UserLoginSerializer,
    ProfileUpdateSerializer,
    UserLookupSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    find_user_by_email,
    update_profile as update_profile_service,
    InvalidCredentialsError,
    InactiveAccountError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class RandomNameResponseSerializer(serializers.Serializer):
    name = serializers.CharField()


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new user profile and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user profile."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data
    try:
        user = register_user(
            email=data['email'],
            password=data['password'],
            full_name=data.get('full_name', ''),
        )
    except DomainError as e:
        return error_response(e)

    return Response({
        'message': 'Registration successful',
        'user': UserSerializer(user).data,
        'tokens': _tokens_for(user),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        user = authenticate_user(
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
        )
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        'tokens': _tokens_for(user),
    })


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=ProfileUpdateSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's display name and/or avatar (image URL or icon:<Name>).",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = ProfileUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = update_profile_service(
            user=request.user,
            full_name=serializer.validated_data.get('full_name'),
            avatar=serializer.validated_data.get('avatar'),
        )
    except DomainError as e:
        return error_response(e)

    return Response(UserSerializer(user).data)


@extend_schema(
    parameters=[OpenApiParameter('email', str, required=True)],
    responses={
        200: UserMinimalSerializer,
        404: ErrorResponseSerializer,
    },
    description="Find a user by exact email, used before sending an account invitation.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def lookup_user(request):
    """Find a user by email."""
    serializer = UserLookupSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    try:
        user = find_user_by_email(email=serializer.validated_data['email'])
    except DomainError as e:
        return error_response(e)

    return Response(UserMinimalSerializer(user).data)


@extend_schema(
    responses={200: RandomNameResponseSerializer},
    description="Suggest a random display name.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def random_name(request):
    """Suggest a random display name."""
    return Response({'name': generate_random_name()})
