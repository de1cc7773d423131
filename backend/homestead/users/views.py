# users/views.py
import logging

from django.contrib.auth import login, logout
from django.db import transaction
from rest_framework import mixins, permissions, status, views, viewsets
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from homestead.exceptions import ConflictError
from .models import User, Invitation
from .permissions import IsAdminRole
from .serializers import (
    UserSerializer, UserCreateSerializer, UserUpdateSerializer, LoginSerializer,
    InvitationSerializer, InvitationCreateSerializer, InvitationRedeemSerializer,
)
from .services import ensure_admin_users, update_user, delete_user, check_invitation, redeem_invitation
from .tasks import send_invitation_email

logger = logging.getLogger(__name__)


def _issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class LoginView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        ensure_admin_users()
        ser = LoginSerializer(data=request.data)
        if not ser.is_valid():
            logger.info("Failed login for %r", request.data.get("username"))
            return Response({"message": "Invalid credentials"}, status=401)
        user = ser.validated_data["user"]
        login(request, user)
        tokens = _issue_tokens(user)
        logger.info("User %s signed in", user.username)
        return Response({"access_token": tokens["access"], "refresh_token": tokens["refresh"], "user": UserSerializer(user).data})


class LogoutView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        refresh = request.data.get("refresh")
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except TokenError as exc:
                logger.debug("Ignoring invalid refresh token on logout: %s", exc)
        logout(request)
        return Response(status=204)


class MeView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class UserViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.all().order_by("-created_at")
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]
    http_method_names = ["get", "post", "put", "delete"]

    def create(self, request, *args, **kwargs):
        ser = UserCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        if User.objects.username_taken(data["username"]):
            raise ConflictError("A user with that username already exists.")
        user = User.objects.create_user(username=data["username"], password=data["password"], role=data["role"])
        logger.info("%s created user %s (%s)", request.user.username, user.username, user.role)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        user = get_object_or_404(User, pk=pk)
        ser = UserUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        previous_role = request.user.role
        user = update_user(user, data["username"], data["role"], data.get("password"))

        payload = {"user": UserSerializer(user).data}
        if request.user.id == user.id and user.role != previous_role:
            # the caller changed their own role; clients should refresh the session
            payload["role_changed"] = True
        return Response(payload)

    def destroy(self, request, pk=None):
        user = get_object_or_404(User, pk=pk)
        delete_user(user, acting_user=request.user)
        logger.info("%s deleted user %s", request.user.username, user.username)
        return Response({"success": True})


class InvitationViewSet(mixins.ListModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = Invitation.objects.all().order_by("-created_at")
    serializer_class = InvitationSerializer
    permission_classes = [IsAdminRole]

    def create(self, request, *args, **kwargs):
        ser = InvitationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        invitation = Invitation.create_for(created_by=request.user, **ser.validated_data)
        if invitation.email:
            transaction.on_commit(lambda: send_invitation_email.delay(str(invitation.id)), robust=True)
        return Response(InvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return Response({"success": True})


class InvitationTokenView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request, token):
        invitation = get_object_or_404(Invitation, token=token)
        check_invitation(invitation)
        return Response(InvitationSerializer(invitation).data)

    def post(self, request, token):
        ser = InvitationRedeemSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        redeem_invitation(token, ser.validated_data["username"], ser.validated_data["password"])
        return Response({"success": True})
