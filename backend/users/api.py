from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import LoginSerializer, ProfileSerializer, SignupSerializer

User = get_user_model()


class SignupView(generics.CreateAPIView):
    """Public registration; new accounts always get the USER role."""

    queryset = User.objects.all()
    serializer_class = SignupSerializer
    permission_classes = [permissions.AllowAny]


class LoginView(TokenObtainPairView):
    """Login endpoint that accepts a username, email or phone as the identifier."""

    permission_classes = [permissions.AllowAny]
    serializer_class = LoginSerializer


class MeView(generics.RetrieveAPIView):
    """Read-only account details of the caller."""

    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user
