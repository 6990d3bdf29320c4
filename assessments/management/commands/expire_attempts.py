import time

from django.core.management.base import BaseCommand

from assessments.attempts import expire_overdue_attempts


class Command(BaseCommand):
    help = 'Submits every in-progress attempt whose time has run out'

    def add_arguments(self, parser):
        parser.add_argument(
            '--loop', type=int, default=0, metavar='SECONDS',
            help='Keep sweeping every SECONDS instead of running once',
        )

    def handle(self, *args, **options):
        interval = options['loop']
        while True:
            expired = expire_overdue_attempts()
            for attempt in expired:
                self.stdout.write(f"Auto-submitted attempt {attempt.pk} ({attempt.exam.title})")
            self.stdout.write(self.style.SUCCESS(f"Expired {len(expired)} attempt(s)"))
            if interval <= 0:
                return
            time.sleep(interval)
