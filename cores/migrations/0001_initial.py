import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PlatformSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('site_name', models.CharField(default='Exam Engine', max_length=100)),
                ('support_email', models.EmailField(default='support@example.org', max_length=254)),
                ('default_exam_duration', models.IntegerField(default=60, help_text='Default duration in minutes')),
                ('max_grading_retries', models.PositiveIntegerField(default=3, help_text='How many times a failed result generation is retried on fetch')),
                ('result_poll_limit', models.PositiveIntegerField(default=10, help_text="Polls a client makes before showing 'result pending'")),
                ('completion_webhook_url', models.URLField(blank=True, help_text='Receives a POST when an attempt is submitted')),
            ],
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete'), ('START', 'Attempt Started'), ('SUBMIT', 'Attempt Submitted'), ('AUTO_SUBMIT', 'Attempt Auto-Submitted'), ('RESULT', 'Result Generated'), ('RESULT_FAILED', 'Result Generation Failed'), ('SETTINGS', 'Settings Changed')], max_length=20)),
                ('target_model', models.CharField(help_text='e.g., Exam, ExamAttempt, Result', max_length=50)),
                ('target_object_id', models.CharField(blank=True, max_length=100, null=True)),
                ('details', models.TextField(blank=True, help_text='Description of changes')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('actor', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp'],
            },
        ),
    ]
