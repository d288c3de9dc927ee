# tasks/email_sender.py
"""
Celery tasks for notification email delivery

Tasks hand messages to whichever sender EMAIL_PROVIDER selects. Delivery
is attempted once; failures are logged and re-raised so the caller sees
them in the task result.
"""

from typing import Any, List, Optional, Union

from celery import Celery
from celery.utils.log import get_task_logger

from config.settings import config_mapping, get_config
from services.email_senders import EmailSender, EmailSenderError, create_email_sender

logger = get_task_logger(__name__)

VERIFICATION_CODE_TTL_MINUTES = 10

_settings = get_config()

celery_app = Celery('site_builder')
celery_app.conf.update({
    'broker_url': _settings.CELERY_BROKER_URL,
    'result_backend': _settings.CELERY_RESULT_BACKEND,

    'task_serializer': 'json',
    'result_serializer': 'json',
    'accept_content': ['json'],

    'timezone': 'UTC',
    'enable_utc': True,

    'result_expires': 3600,
    'task_routes': {
        'tasks.email_sender.*': {'queue': 'email_sending'},
    },

    'worker_hijack_root_logger': False,
    'worker_log_color': False,
})


def get_email_sender() -> EmailSender:
    """Sender for the current configuration"""
    return create_email_sender(config_mapping(_settings))


@celery_app.task(name='tasks.email_sender.send_notification_email')
def send_notification_email(to: Union[str, List[str]],
                            subject: str,
                            html: Optional[str] = None,
                            text: Optional[str] = None) -> Any:
    """
    Deliver one notification email

    Returns:
        Vendor response payload
    """
    try:
        result = get_email_sender().send_email(to=to, subject=subject, html=html, text=text)
    except EmailSenderError as e:
        logger.error(f"Notification email '{subject}' failed: {e}")
        raise
    logger.info(f"Notification email '{subject}' sent")
    return result


def build_verification_email(code: str, ttl_minutes: int = VERIFICATION_CODE_TTL_MINUTES) -> dict:
    return {
        'subject': 'Your Tart verification code',
        'text': f"Your Tart verification code is {code}. It expires in {ttl_minutes} minutes.",
        'html': f"<p>Your Tart verification code is <b>{code}</b>. It expires in {ttl_minutes} minutes.</p>",
    }


@celery_app.task(name='tasks.email_sender.send_verification_code')
def send_verification_code(email: str, code: str, ttl_minutes: int = VERIFICATION_CODE_TTL_MINUTES) -> Any:
    """Email a one-time verification code"""
    message = build_verification_email(code, ttl_minutes)
    try:
        result = get_email_sender().send_email(to=email, **message)
    except EmailSenderError as e:
        logger.error(f"Verification code email failed: {e}")
        raise
    logger.info("Verification code email sent")
    return result
