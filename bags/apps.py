from django.apps import AppConfig


class BagsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bags'
