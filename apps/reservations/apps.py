from django.apps import AppConfig


class ReservationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.reservations"
    verbose_name = "Reservations"

    def ready(self) -> None:  # pragma: no cover - import side effects
        from . import signals  # noqa: F401
        from .application.event_handlers import register_handlers

        register_handlers()
