# users/tasks.py
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

from .models import Invitation


@shared_task
def send_invitation_email(invitation_id):
    invitation = Invitation.objects.filter(id=invitation_id).first()
    if invitation is None or not invitation.email:
        return
    url = f"{settings.FRONTEND_BASE_URL}/signup/{invitation.token}"
    send_mail(
        "You have been invited",
        f"Create your {invitation.get_role_display().lower()} account: {url}",
        settings.DEFAULT_FROM_EMAIL,
        [invitation.email],
        fail_silently=True,
    )
