# users/tests.py
import threading
from datetime import timedelta
from unittest import mock

from django.contrib.auth.hashers import make_password
from django.core import mail
from django.db import OperationalError, connection
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient, APITestCase, APITransactionTestCase

from homestead.exceptions import ConflictError
from users.models import User, Invitation
from users.services import delete_user, ensure_admin_users, reset_admin_seed_guard, update_user


class AuthFlowTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="Alice", password="S3curePass!", role="editor")

    def test_login_returns_tokens(self):
        r = self.client.post("/api/auth/login/", {"username": "alice", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 200)
        self.assertIn("access_token", r.data)
        self.assertEqual(r.data["user"]["username"], "Alice")

        tok = r.data["access_token"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tok}")
        me = self.client.get("/api/auth/me/")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["role"], "editor")

    def test_login_rejects_bad_password(self):
        r = self.client.post("/api/auth/login/", {"username": "alice", "password": "wrong-password"})
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.data["message"], "Invalid credentials")

    def test_me_requires_authentication(self):
        r = self.client.get("/api/auth/me/")
        self.assertEqual(r.status_code, 401)


class AdminSeedTests(APITestCase):
    def tearDown(self):
        reset_admin_seed_guard()

    @override_settings(ADMIN_SEED_USERS=[{"username": "Root", "password_hash": make_password("seeded-pass")}])
    def test_seeded_admin_can_log_in(self):
        reset_admin_seed_guard()
        r = self.client.post("/api/auth/login/", {"username": "root", "password": "seeded-pass"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["user"]["role"], "admin")

    @override_settings(ADMIN_SEED_USERS=[{"username": "root", "password_hash": make_password("seeded-pass")}])
    def test_seeding_promotes_existing_account(self):
        User.objects.create_user(username="Root", password="old-password", role="editor")
        ensure_admin_users(force=True)
        user = User.objects.get(username_normalized="root")
        self.assertEqual(user.role, "admin")
        self.assertTrue(user.check_password("seeded-pass"))
        self.assertEqual(User.objects.count(), 1)


class UserAdminApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="S3curePass!", role="admin")
        self.client.force_authenticate(self.admin)

    def test_requires_admin_role(self):
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/users/").status_code, 401)

        editor = User.objects.create_user(username="editor", password="S3curePass!")
        self.client.force_authenticate(editor)
        r = self.client.get("/api/users/")
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.data["message"], "Unauthorized")

    def test_create_and_duplicate_username(self):
        r = self.client.post("/api/users/", {"username": "Writer", "password": "S3curePass!", "role": "editor"})
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data["role"], "editor")

        r = self.client.post("/api/users/", {"username": "writer", "password": "S3curePass!", "role": "editor"})
        self.assertEqual(r.status_code, 409)

    def test_create_validates_fields(self):
        r = self.client.post("/api/users/", {"username": "ab", "password": "short", "role": "owner"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("username", r.data["errors"])
        self.assertIn("password", r.data["errors"])
        self.assertIn("role", r.data["errors"])

    def test_cannot_demote_last_admin(self):
        r = self.client.put(f"/api/users/{self.admin.id}/", {"username": "admin", "role": "editor"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.data["message"], "Cannot change role. At least one admin is required.")
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, "admin")

    def test_demoting_self_reports_role_change(self):
        User.objects.create_user(username="second", password="S3curePass!", role="admin")
        r = self.client.put(f"/api/users/{self.admin.id}/", {"username": "admin", "role": "editor", "password": ""})
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data["role_changed"])
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password("S3curePass!"))

    def test_cannot_delete_self(self):
        r = self.client.delete(f"/api/users/{self.admin.id}/")
        self.assertEqual(r.status_code, 400)
        self.assertTrue(User.objects.filter(id=self.admin.id).exists())

    def test_delete_other_user(self):
        other = User.objects.create_user(username="other", password="S3curePass!")
        r = self.client.delete(f"/api/users/{other.id}/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data, {"success": True})

    def test_unknown_user_is_404(self):
        r = self.client.delete("/api/users/not-a-uuid/")
        self.assertEqual(r.status_code, 404)


class LastAdminServiceTests(TestCase):
    def test_last_admin_cannot_be_deleted(self):
        admin = User.objects.create_user(username="admin", password="S3curePass!", role="admin")
        with self.assertRaises(ConflictError):
            delete_user(admin, acting_user=None)
        self.assertTrue(User.objects.filter(id=admin.id).exists())

    def test_guard_locks_every_admin_in_order(self):
        first = User.objects.create_user(username="first", password="S3curePass!", role="admin")
        second = User.objects.create_user(username="second", password="S3curePass!", role="admin")
        User.objects.create_user(username="writer", password="S3curePass!")
        self.assertEqual(User.objects.lock_admins(), sorted([first.id, second.id]))

        update_user(first, "first", "editor")
        with self.assertRaises(ConflictError):
            update_user(second, "second", "editor")
        second.refresh_from_db()
        self.assertEqual(second.role, "admin")


class InvitationApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", password="S3curePass!", role="admin")
        self.client.force_authenticate(self.admin)

    def test_create_with_email_sends_mail(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            r = self.client.post("/api/invitations/", {"email": "new@homestead.test", "role": "editor"})
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data["status"], "active")
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(r.data["token"], mail.outbox[0].body)

    def test_create_without_email(self):
        r = self.client.post("/api/invitations/", {"email": "", "role": "admin", "expires_at": ""})
        self.assertEqual(r.status_code, 201)
        self.assertIsNone(r.data["email"])
        self.assertIsNone(r.data["expires_at"])
        self.assertEqual(len(mail.outbox), 0)

    def test_list_and_delete(self):
        invitation = Invitation.create_for(role="editor", created_by=self.admin)
        r = self.client.get("/api/invitations/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(len(r.data), 1)

        r = self.client.delete(f"/api/invitations/{invitation.id}/")
        self.assertEqual(r.data, {"success": True})
        self.assertFalse(Invitation.objects.exists())


class InvitationRedeemTests(APITestCase):
    def setUp(self):
        self.invitation = Invitation.create_for(role="editor", expires_at=timezone.now() + timedelta(days=7))
        self.url = f"/api/invitations/token/{self.invitation.token}/"

    def test_lookup(self):
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["role"], "editor")

        r = self.client.get("/api/invitations/token/missing-token/")
        self.assertEqual(r.status_code, 404)

    def test_redeems_exactly_once(self):
        r = self.client.post(self.url, {"username": "newbie", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data, {"success": True})

        user = User.objects.get(username="newbie")
        self.assertEqual(user.role, "editor")
        self.invitation.refresh_from_db()
        self.assertIsNotNone(self.invitation.used_at)
        self.assertEqual(self.invitation.consumed_by, user)

        r = self.client.post(self.url, {"username": "another", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 410)
        self.assertEqual(r.data["message"], "Invitation already used.")
        self.assertIn("used_at", r.data)
        self.assertFalse(User.objects.filter(username="another").exists())

        self.assertEqual(self.client.get(self.url).status_code, 410)

    def test_expired_invitation(self):
        self.invitation.expires_at = timezone.now() - timedelta(minutes=1)
        self.invitation.save()
        r = self.client.get(self.url)
        self.assertEqual(r.status_code, 410)
        self.assertEqual(r.data["message"], "Invitation expired.")

        r = self.client.post(self.url, {"username": "late", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 410)
        self.assertEqual(self.invitation.status, "expired")

    def test_duplicate_username_leaves_invitation_unused(self):
        User.objects.create_user(username="Taken", password="S3curePass!")
        r = self.client.post(self.url, {"username": "taken", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 409)
        self.invitation.refresh_from_db()
        self.assertIsNone(self.invitation.used_at)
        self.assertEqual(self.invitation.status, "active")

    def test_validation_errors(self):
        r = self.client.post(self.url, {"username": "ab", "password": "short"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.data["errors"]["password"], ["Password must be at least 8 characters"])


class ConcurrentRedeemTests(APITransactionTestCase):
    def setUp(self):
        self.invitation = Invitation.create_for(role="editor")
        self.url = f"/api/invitations/token/{self.invitation.token}/"

    def test_second_redeemer_is_told_used(self):
        barrier = threading.Barrier(2)
        statuses = {}

        def redeem(username):
            client = APIClient()
            try:
                barrier.wait(timeout=5)
                r = client.post(self.url, {"username": username, "password": "S3curePass!"})
                statuses[username] = r.status_code
            finally:
                connection.close()

        threads = [threading.Thread(target=redeem, args=(name,)) for name in ("alpha", "bravo")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(statuses.values()), [200, 410])
        winner = next(name for name, code in statuses.items() if code == 200)
        created = User.objects.filter(username__in=["alpha", "bravo"]).values_list("username", flat=True)
        self.assertEqual(list(created), [winner])
        self.invitation.refresh_from_db()
        self.assertEqual(self.invitation.consumed_by.username, winner)

    def test_lost_claim_rolls_back_user(self):
        create_user = User.objects.create_user

        def create_then_lose_claim(**kwargs):
            user = create_user(**kwargs)
            # another redeemer commits between our check and our claim
            Invitation.objects.filter(id=self.invitation.id).update(used_at=timezone.now())
            return user

        with mock.patch.object(User.objects, "create_user", side_effect=create_then_lose_claim):
            r = self.client.post(self.url, {"username": "late", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 410)
        self.assertEqual(r.data["message"], "Invitation already used.")
        self.assertFalse(User.objects.filter(username="late").exists())
        self.invitation.refresh_from_db()
        self.assertIsNone(self.invitation.used_at)

    def test_lock_error_reads_as_used(self):
        with mock.patch("users.services._redeem", side_effect=OperationalError("database table is locked")):
            r = self.client.post(self.url, {"username": "late", "password": "S3curePass!"})
        self.assertEqual(r.status_code, 410)
        self.assertEqual(r.data["message"], "Invitation already used.")


class UserDjangoAdminTests(TestCase):
    def setUp(self):
        self.root = User.objects.create_superuser(username="root", password="S3curePass!")
        self.client.force_login(self.root)

    def test_cannot_demote_last_admin(self):
        r = self.client.post(f"/admin/users/user/{self.root.pk}/change/", {
            "username": "root", "role": "editor", "is_active": "on", "is_superuser": "on",
        })
        self.assertEqual(r.status_code, 200)
        self.assertContains(r, "At least one admin is required.")
        self.root.refresh_from_db()
        self.assertEqual(self.root.role, "admin")

    def test_cannot_delete_self_or_last_admin(self):
        r = self.client.post(f"/admin/users/user/{self.root.pk}/delete/", {"post": "yes"})
        self.assertEqual(r.status_code, 403)
        self.assertTrue(User.objects.filter(pk=self.root.pk).exists())

    def test_delete_other_admin(self):
        other = User.objects.create_user(username="ops", password="S3curePass!", role="admin")
        r = self.client.post(f"/admin/users/user/{other.pk}/delete/", {"post": "yes"})
        self.assertEqual(r.status_code, 302)
        self.assertFalse(User.objects.filter(pk=other.pk).exists())

    def test_bulk_delete_goes_through_guard(self):
        other = User.objects.create_user(username="ops", password="S3curePass!", role="admin")
        with mock.patch("users.admin.delete_user", wraps=delete_user) as guarded:
            self.client.post("/admin/users/user/", {
                "action": "delete_selected", "_selected_action": [str(other.pk)], "post": "yes",
            })
        guarded.assert_called_once_with(other, acting_user=self.root)
        self.assertFalse(User.objects.filter(pk=other.pk).exists())
