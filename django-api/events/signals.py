"""Django signals for cache invalidation.

Cached DJ token responses embed the timeslot, its event and its submission,
so a save or delete of any of the three drops the affected entries once the
write commits. Invalidation is best effort: a cache failure is logged and the
write stands.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from events.handlers.cache import invalidate_timeslots
from events.models import Event, Submission, Timeslot

logger = logging.getLogger(__name__)


def _invalidate_now(timeslot_ids: list) -> None:
    try:
        invalidate_timeslots(timeslot_ids)
    except Exception:
        logger.exception("Token cache invalidation failed")


def _invalidate(timeslot_ids) -> None:
    ids = list(timeslot_ids)
    transaction.on_commit(lambda: _invalidate_now(ids))


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate cached token responses for every timeslot of the event."""
    if kwargs.get("signal") is post_delete:
        # Cascaded timeslot deletes send their own signals.
        return
    _invalidate(Timeslot.objects.filter(event_id=instance.pk).values_list("id", flat=True))


@receiver([post_save, post_delete], sender=Timeslot)
def invalidate_timeslot_cache(sender, instance, **kwargs):
    _invalidate([instance.pk])


@receiver([post_save, post_delete], sender=Submission)
def invalidate_submission_cache(sender, instance, **kwargs):
    _invalidate([instance.timeslot_id])
