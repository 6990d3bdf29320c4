import os
import shutil
from datetime import datetime

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Copies the sqlite database into the local backups folder'

    def handle(self, *args, **options):
        db_path = settings.DATABASES['default']['NAME']
        backup_dir = os.path.join(settings.BASE_DIR, 'backups')
        os.makedirs(backup_dir, exist_ok=True)

        if not os.path.exists(db_path):
            raise CommandError(f"Database not found at {db_path}")

        timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
        dest_path = os.path.join(backup_dir, f"manual_backup_{timestamp}.sqlite3")
        shutil.copy2(db_path, dest_path)
        self.stdout.write(self.style.SUCCESS(f"Backup created at {dest_path}"))
