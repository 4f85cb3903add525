from django.apps import AppConfig


class PassbookConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'passbook'
    verbose_name = 'Passbook'
