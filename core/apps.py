import logging
from django.apps import AppConfig
from django.conf import settings
from django.db import connection

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'
    verbose_name = 'Core (Chit Fund)'

    def ready(self):
        logger.info(
            'DB=%s commission=%s timeout=%ss',
            connection.vendor,
            settings.DEFAULT_COMMISSION_RATE,
            settings.REQUEST_TIMEOUT_SECONDS,
        )
