"""
Cache invalidation signals
Drop a site's dashboard cache whenever data it summarises changes
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
import logging

from .cache_utils import invalidate_site_cache

logger = logging.getLogger(__name__)

SITE_SCOPED_MODELS = [
    'materials.Material',
    'materials.MaterialTransaction',
    'labor.Worker',
    'labor.Attendance',
    'expenses.Expense',
]


def invalidate_for_site_scoped(sender, instance, **kwargs):
    site_id = getattr(instance, 'site_id', None)
    # Readers between the write and the commit must not repopulate a stale entry
    transaction.on_commit(lambda: invalidate_site_cache(site_id))


def invalidate_for_site(sender, instance, **kwargs):
    site_id = instance.pk
    transaction.on_commit(lambda: invalidate_site_cache(site_id))


def connect_cache_signals():
    """Called from CoreConfig.ready(); senders are lazy 'app_label.Model' references"""
    for model in SITE_SCOPED_MODELS:
        post_save.connect(invalidate_for_site_scoped, sender=model, dispatch_uid=f'cache-save-{model}')
        post_delete.connect(invalidate_for_site_scoped, sender=model, dispatch_uid=f'cache-delete-{model}')
    post_save.connect(invalidate_for_site, sender='sites.Site', dispatch_uid='cache-save-sites.Site')
    post_delete.connect(invalidate_for_site, sender='sites.Site', dispatch_uid='cache-delete-sites.Site')
