import logging

from django.conf import settings
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import LoginSerializer, UserRoleSerializer

logger = logging.getLogger(__name__)


class LoginView(APIView):
    """Unified login endpoint supporting username or email.

    Returns access & refresh tokens and also sets the access token as an
    HTTP-only cookie so the browser client never has to store it.
    """
    authentication_classes = []
    permission_classes = []
    parser_classes = [JSONParser, FormParser, MultiPartParser]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'success': False, 'message': 'Invalid username/email or password.', 'errors': serializer.errors},
                status=status.HTTP_401_UNAUTHORIZED
            )

        user = serializer.validated_data['user']
        refresh = RefreshToken.for_user(user)
        access = str(refresh.access_token)

        response = Response({
            'success': True,
            'access': access,
            'refresh': str(refresh),
            'role': user.role,
            'email': user.email,
        })
        response.set_cookie(
            settings.JWT_AUTH_COOKIE,
            access,
            httponly=True,
            secure=settings.JWT_AUTH_COOKIE_SECURE,
            samesite='Lax',
            max_age=int(settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME'].total_seconds()),
        )

        logger.info("User %s logged in as %s", user.username, user.role)
        return response


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        response = Response({'success': True, 'message': 'Logged out successfully.'})
        response.delete_cookie(settings.JWT_AUTH_COOKIE)
        return response


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({'success': True, 'data': UserRoleSerializer(request.user).data})
