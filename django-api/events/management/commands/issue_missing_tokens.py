from django.core.management.base import BaseCommand

from events.wiring import get_services


class Command(BaseCommand):
    help = "Give every timeslot without a submission token a fresh one."

    def handle(self, *args, **options):
        count = get_services().timeslots.issue_missing_tokens()
        self.stdout.write(self.style.SUCCESS(f"Issued tokens for {count} timeslot(s)."))
