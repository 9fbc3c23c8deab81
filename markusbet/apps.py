from django.apps import AppConfig


class MarkusBetConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "markusbet"
    verbose_name = "MarkusBet"
