"""Django signals that recover orphan tickets.

Whenever an account appears or signs in, tickets bought with its e-mail
and never bound to anyone are linked to it.
"""

from django.conf import settings
from django.contrib.auth.signals import user_logged_in
from django.db.models.signals import post_save
from django.dispatch import receiver

from ticketing.handlers import dependencies


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def link_tickets_on_signup(sender, instance, created, **kwargs):
    """Link orphan tickets when a new account is created."""
    if created and instance.email:
        dependencies.linking_service().link_orphan_tickets(str(instance.pk), instance.email)


@receiver(user_logged_in)
def link_tickets_on_login(sender, request, user, **kwargs):
    """Catch tickets bought with the account's e-mail since the last login."""
    if user.email:
        dependencies.linking_service().link_orphan_tickets(str(user.pk), user.email)
