import os
import shutil

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Restores the sqlite database from a backup file'

    def add_arguments(self, parser):
        parser.add_argument('filename', type=str, help='The backup filename')

    def handle(self, *args, **options):
        filename = options['filename']
        # Look in the local 'backups' folder
        backup_file = os.path.join(settings.BASE_DIR, 'backups', filename)
        db_path = settings.DATABASES['default']['NAME']

        if not os.path.exists(backup_file):
            raise CommandError(f"Backup {filename} not found!")

        try:
            # Keep the current database next to the restored one
            if os.path.exists(db_path):
                shutil.copy2(db_path, str(db_path) + ".tmp")
            shutil.copy2(backup_file, db_path)
        except OSError as e:
            raise CommandError(f"Restore failed: {e}")

        self.stdout.write(self.style.SUCCESS(f"Successfully restored {filename}"))
