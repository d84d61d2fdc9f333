"""Django signals bridging user registration into the reservation domain."""

from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from shared.application.message_bus import message_bus

from .domain.events import UserRegistered


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def publish_user_registered(sender, instance, created, **kwargs):
    """Publish UserRegistered once the new account is committed."""
    if not created or not instance.email:
        return

    event = UserRegistered(user_id=instance.pk, email=instance.email)
    transaction.on_commit(lambda: message_bus.publish_events([event]))
