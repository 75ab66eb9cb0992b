# he_core/care_transitions/apps.py
from django.apps import AppConfig


class CareTransitionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "he_core.care_transitions"

    def ready(self):
        # Registers the encounter.discharged handler
        from he_core.care_transitions import subscribers  # noqa: F401
