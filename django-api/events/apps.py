from django.apps import AppConfig


class EventsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "events"
    verbose_name = "DJ Events"

    services = None

    def ready(self) -> None:
        from events import signals  # noqa: F401
        from events.wiring import build_services

        self.services = build_services()
