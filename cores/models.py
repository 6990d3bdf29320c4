from django.conf import settings
from django.core.cache import cache
from django.db import models


class PlatformSetting(models.Model):
    # --- General ---
    site_name = models.CharField(max_length=100, default="Exam Engine")
    support_email = models.EmailField(default="support@example.org")

    # --- Exam Defaults ---
    default_exam_duration = models.IntegerField(default=60, help_text="Default duration in minutes")

    # --- Result Generation ---
    max_grading_retries = models.PositiveIntegerField(
        default=3, help_text="How many times a failed result generation is retried on fetch"
    )
    result_poll_limit = models.PositiveIntegerField(
        default=10, help_text="Polls a client makes before showing 'result pending'"
    )

    # --- Notifications ---
    completion_webhook_url = models.URLField(blank=True, help_text="Receives a POST when an attempt is submitted")

    def save(self, *args, **kwargs):
        self.pk = 1  # Singleton pattern
        super().save(*args, **kwargs)
        cache.set('platform_settings', self)

    def delete(self, *args, **kwargs):
        pass

    @classmethod
    def load(cls):
        obj = cache.get('platform_settings')
        if obj is None:
            obj, created = cls.objects.get_or_create(pk=1)
            cache.set('platform_settings', obj)
        return obj

    def __str__(self):
        return "Platform Settings"


class AuditLog(models.Model):
    ACTION_CHOICES = [
        ('CREATE', 'Create'),
        ('UPDATE', 'Update'),
        ('DELETE', 'Delete'),
        ('START', 'Attempt Started'),
        ('SUBMIT', 'Attempt Submitted'),
        ('AUTO_SUBMIT', 'Attempt Auto-Submitted'),
        ('RESULT', 'Result Generated'),
        ('RESULT_FAILED', 'Result Generation Failed'),
        ('SETTINGS', 'Settings Changed'),
    ]

    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    target_model = models.CharField(max_length=50, help_text="e.g., Exam, ExamAttempt, Result")
    target_object_id = models.CharField(max_length=100, blank=True, null=True)
    details = models.TextField(blank=True, help_text="Description of changes")
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.actor} - {self.action} - {self.timestamp}"
