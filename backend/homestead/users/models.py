# users/models.py
import uuid

from django.conf import settings
from django.contrib.auth.base_user import AbstractBaseUser
from django.contrib.auth.models import PermissionsMixin
from django.db import models
from django.utils import timezone

# ---- User Manager ----
from django.contrib.auth.models import BaseUserManager


def normalize_username(username):
    return (username or "").strip().lower()


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, username, password, **extra):
        if not username:
            raise ValueError("Username is required")
        username = username.strip()
        user = self.model(username=username, username_normalized=normalize_username(username), **extra)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, username, password=None, **extra):
        extra.setdefault("role", User.ROLE_EDITOR)
        return self._create_user(username, password, **extra)

    def create_superuser(self, username, password, **extra):
        extra["role"] = User.ROLE_ADMIN
        extra.setdefault("is_superuser", True)
        if extra.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")
        return self._create_user(username, password, **extra)

    def get_by_natural_key(self, username):
        return self.get(username_normalized=normalize_username(username))

    def find_by_login(self, username):
        """Match the normalized form first, then the exact username."""
        username = (username or "").strip()
        return (
            self.filter(username_normalized=normalize_username(username)).first()
            or self.filter(username=username).first()
        )

    def username_taken(self, username, exclude_id=None):
        qs = self.filter(
            models.Q(username=username) | models.Q(username_normalized=normalize_username(username))
        )
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        return qs.exists()

    def admins(self):
        return self.filter(role=User.ROLE_ADMIN)

    def lock_admins(self):
        """Lock every admin row in id order and return their ids."""
        return list(self.admins().select_for_update().order_by("id").values_list("id", flat=True))


# ---- Core Models ----
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_ADMIN = "admin"
    ROLE_EDITOR = "editor"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_EDITOR, "Editor"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=150, unique=True)
    username_normalized = models.CharField(max_length=150, unique=True, db_index=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_EDITOR)

    is_active = models.BooleanField(default=True)

    last_login = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        self.username_normalized = normalize_username(self.username)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.username

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_staff(self):
        # Django admin access follows the admin role
        return self.is_admin


class Invitation(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_USED = "used"
    STATUS_EXPIRED = "expired"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    token = models.CharField(max_length=64, unique=True, db_index=True)
    email = models.EmailField(null=True, blank=True)
    role = models.CharField(max_length=16, choices=User.ROLE_CHOICES, default=User.ROLE_EDITOR)
    expires_at = models.DateTimeField(null=True, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="invitations_sent"
    )
    consumed_by = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="invitation"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    @classmethod
    def create_for(cls, role, email=None, expires_at=None, created_by=None):
        return cls.objects.create(
            token=str(uuid.uuid4()),
            role=role,
            email=email or None,
            expires_at=expires_at,
            created_by=created_by,
        )

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        return self.expires_at < (now or timezone.now())

    @property
    def status(self):
        if self.used_at is not None:
            return self.STATUS_USED
        if self.is_expired():
            return self.STATUS_EXPIRED
        return self.STATUS_ACTIVE

    def __str__(self):
        return f"Invitation<{self.email or self.token}> ({self.status})"
