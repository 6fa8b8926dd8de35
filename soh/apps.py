from django.apps import AppConfig


class SohConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'soh'
    verbose_name = 'Stock on Hand'
