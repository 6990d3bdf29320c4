from django.core.management.base import BaseCommand

from assessments.attempts import retry_missing_results
from assessments.models import ExamAttempt


class Command(BaseCommand):
    help = 'Regenerates results for submitted attempts that do not have one'

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=None, help='Process at most this many attempts')

    def handle(self, *args, **options):
        generated = retry_missing_results(limit=options['limit'])
        still_pending = ExamAttempt.objects.filter(
            status=ExamAttempt.Status.SUBMITTED, result__isnull=True
        ).count()

        self.stdout.write(self.style.SUCCESS(f"Generated {len(generated)} result(s)"))
        if still_pending:
            self.stdout.write(self.style.WARNING(f"{still_pending} attempt(s) still have no result"))
