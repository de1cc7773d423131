# users/admin.py
from django import forms
from django.contrib import admin, messages
from django.db import transaction
from rest_framework.exceptions import ValidationError

from homestead.exceptions import ConflictError
from .models import User, Invitation
from .services import delete_user, ensure_other_admin

LAST_ADMIN_ROLE_MESSAGE = "Cannot change role. At least one admin is required."


class UserAdminForm(forms.ModelForm):
    class Meta:
        model = User
        exclude = ("password", "groups", "user_permissions")

    def clean_role(self):
        role = self.cleaned_data["role"]
        # instance still holds the stored role here
        if self.instance.pk and self.instance.role == User.ROLE_ADMIN and role != User.ROLE_ADMIN:
            if not User.objects.admins().exclude(pk=self.instance.pk).exists():
                raise forms.ValidationError(LAST_ADMIN_ROLE_MESSAGE)
        return role


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    form = UserAdminForm
    list_display = ("username", "role", "is_active", "created_at")
    search_fields = ("username", "username_normalized")
    list_filter = ("role", "is_active")
    readonly_fields = ("username_normalized", "last_login", "created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        if obj is not None:
            if obj.pk == request.user.pk:
                return False
            if obj.is_admin and not User.objects.admins().exclude(pk=obj.pk).exists():
                return False
        return super().has_delete_permission(request, obj)

    def save_model(self, request, obj, form, change):
        with transaction.atomic():
            if change and form.initial.get("role") == User.ROLE_ADMIN and obj.role != User.ROLE_ADMIN:
                ensure_other_admin(obj, LAST_ADMIN_ROLE_MESSAGE)
            super().save_model(request, obj, form, change)

    def delete_model(self, request, obj):
        delete_user(obj, acting_user=request.user)

    def delete_queryset(self, request, queryset):
        try:
            with transaction.atomic():
                for user in queryset:
                    delete_user(user, acting_user=request.user)
        except ConflictError as exc:
            self.message_user(request, f"No users were deleted: {exc.detail}", level=messages.ERROR)
        except ValidationError as exc:
            errors = " ".join(exc.detail["non_field_errors"])
            self.message_user(request, f"No users were deleted: {errors}", level=messages.ERROR)


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ("email", "token", "role", "expires_at", "used_at", "created_at")
    search_fields = ("email", "token")
    list_filter = ("role",)
    readonly_fields = ("token", "used_at", "consumed_by", "created_at")
