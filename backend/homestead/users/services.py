# users/services.py
import logging

from django.conf import settings
from django.db import OperationalError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from homestead.exceptions import ConflictError, Gone
from .models import User, Invitation, normalize_username

logger = logging.getLogger(__name__)

_admin_seeded = False


def ensure_admin_users(force=False):
    """
    Upsert the accounts in ``settings.ADMIN_SEED_USERS`` as admins.

    Runs once per process; ``force`` re-runs it (used by tests).
    """
    global _admin_seeded
    if _admin_seeded and not force:
        return 0

    for seed in settings.ADMIN_SEED_USERS:
        username = seed["username"].strip()
        User.objects.update_or_create(
            username_normalized=normalize_username(username),
            defaults={
                "username": username,
                "password": seed["password_hash"],
                "role": User.ROLE_ADMIN,
            },
        )
        logger.info("Seeded admin account %s", username)

    _admin_seeded = True
    return len(settings.ADMIN_SEED_USERS)


def reset_admin_seed_guard():
    global _admin_seeded
    _admin_seeded = False


def ensure_other_admin(user, message):
    # the target row is locked too, so concurrent demotions queue in one order
    remaining = [admin_id for admin_id in User.objects.lock_admins() if admin_id != user.id]
    if not remaining:
        logger.warning("Rejected change to last admin %s", user.username)
        raise ConflictError(message)


@transaction.atomic
def update_user(user, username, role, password=None):
    if User.objects.username_taken(username, exclude_id=user.id):
        raise ConflictError("A user with that username already exists.")

    if user.role == User.ROLE_ADMIN and role != User.ROLE_ADMIN:
        ensure_other_admin(user, "Cannot change role. At least one admin is required.")

    user.username = username
    user.role = role
    if password:
        user.set_password(password)
    user.save()
    return user


@transaction.atomic
def delete_user(user, acting_user):
    if acting_user is not None and acting_user.id == user.id:
        raise ValidationError({"non_field_errors": ["You cannot delete your own account."]})

    if user.role == User.ROLE_ADMIN:
        ensure_other_admin(user, "Cannot delete the last admin account.")

    user.delete()


def check_invitation(invitation):
    """Raise ``Gone`` unless the invitation can still be redeemed."""
    if invitation.used_at is not None:
        raise Gone("Invitation already used.", payload={"used_at": invitation.used_at})
    if invitation.is_expired():
        raise Gone("Invitation expired.", payload={"expires_at": invitation.expires_at})


def redeem_invitation(token, username, password):
    """
    Consume an invitation and create its user in one transaction.

    The row lock serializes redeemers on databases that support it; the
    conditional update below is what guarantees a single winner everywhere.
    SQLite reports a redeemer it could not serialize as a lock error, which
    means another redemption holds the write lock.
    """
    try:
        return _redeem(token, username, password)
    except OperationalError as exc:
        if "locked" not in str(exc):
            raise
        logger.warning("Redemption by %s blocked by a concurrent writer: %s", username, exc)
        raise Gone("Invitation already used.")


def _redeem(token, username, password):
    with transaction.atomic():
        invitation = Invitation.objects.select_for_update().filter(token=token).first()
        if invitation is None:
            raise NotFound("Invitation not found.")
        check_invitation(invitation)

        if User.objects.username_taken(username):
            raise ConflictError("A user with that username already exists.")

        user = User.objects.create_user(username=username, password=password, role=invitation.role)

        claimed = Invitation.objects.filter(id=invitation.id, used_at__isnull=True).update(
            used_at=timezone.now(), consumed_by=user
        )
        if claimed != 1:
            # rolls back the user created above
            raise Gone("Invitation already used.")

    logger.info("Invitation %s redeemed by %s", invitation.id, user.username)
    return user
