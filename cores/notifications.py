# cores/notifications.py
"""
Completion sink. Consumers are told about attempt events; nothing here is
ever consulted for grading, so failures are logged and dropped.
"""
import logging

import requests
from django.db import DatabaseError, transaction

from .models import AuditLog, PlatformSetting

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 10


def record_event(actor, action, target, details=""):
    try:
        AuditLog.objects.create(
            actor=actor,
            action=action,
            target_model=type(target).__name__,
            target_object_id=str(target.pk),
            details=details,
        )
    except DatabaseError:
        logger.exception("Could not write audit log entry %s for %s %s", action, type(target).__name__, target.pk)


def post_webhook(url, payload):
    try:
        resp = requests.post(url, json=payload, timeout=WEBHOOK_TIMEOUT)
        resp.raise_for_status()
        return True
    except requests.exceptions.Timeout:
        logger.warning("Completion webhook timed out: %s", url)
    except requests.exceptions.ConnectionError:
        logger.warning("Completion webhook unreachable: %s", url)
    except requests.exceptions.RequestException as e:
        logger.error(f"Completion webhook failed: {e}")
    return False


def notify_completion(attempt, result=None):
    """Announce a submitted attempt to the audit log and the optional webhook."""
    action = 'AUTO_SUBMIT' if attempt.auto_submitted else 'SUBMIT'
    record_event(attempt.student, action, attempt, details=f"Submitted {attempt.exam.title}")

    try:
        url = PlatformSetting.load().completion_webhook_url
    except DatabaseError:
        logger.exception("Could not read platform settings, skipping completion webhook for attempt %s", attempt.pk)
        return
    if not url:
        return

    payload = {
        "event": "attempt.submitted",
        "attempt_id": attempt.pk,
        "exam_id": attempt.exam_id,
        "student_id": attempt.student_id,
        "auto_submitted": attempt.auto_submitted,
        "submitted_at": attempt.submitted_at.isoformat() if attempt.submitted_at else None,
        "result_ready": result is not None,
    }
    if result is not None:
        payload["obtained_marks"] = str(result.obtained_marks)
        payload["percentage"] = str(result.percentage)
    # Posted after commit so a slow endpoint never holds a transaction open
    transaction.on_commit(lambda: post_webhook(url, payload))
