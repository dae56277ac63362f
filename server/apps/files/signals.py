"""Signal handlers for files app."""

import functools
import logging

from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.files.models import File

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=File)
def discard_blob_on_commit(
    sender: type[File],
    instance: File,
    **kwargs: object,
) -> None:
    """Schedule removal of a deleted record's blob.

    Covers single deletes and the bulk deletes of a folder subtree. The
    blob goes only after the surrounding transaction commits, so a
    rolled-back delete keeps its bytes.

    Args:
        sender: The File model class.
        instance: The deleted File.
        **kwargs: Additional signal arguments.
    """
    if not instance.stored_name:
        return
    logger.debug(
        'File %s deleted, blob %s queued for removal',
        instance.pk,
        instance.stored_name,
    )
    transaction.on_commit(
        functools.partial(default_storage.discard, instance.stored_name),
    )
