import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def send_welcome_email(user, password):
    """
    Mail a new staff member their login details.

    Delivery problems are logged; account creation must never fail because
    of them.
    """
    subject = 'Welcome to the Restaurant Management System'
    message = (
        f"Hello {user.get_full_name() or user.username},\n\n"
        f"An account has been created for you with the role: {user.get_role_display()}.\n\n"
        f"Username: {user.username}\n"
        f"Password: {password}\n\n"
        "Please change your password after your first login.\n"
    )
    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [user.email], fail_silently=False)
    except Exception as exc:
        logger.error("Failed to send welcome email to %s: %s", user.email, exc)
    else:
        logger.info("Welcome email sent to %s", user.email)
