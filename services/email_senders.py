# services/email_senders.py
"""
Transactional email senders

One contract, two vendors:
- ResendEmailSender: Resend transactional email API
- SesEmailSender: AWS Simple Email Service

Both expose ``send_email(to, subject, html, text)`` and return the vendor
response unchanged. Callers pick one through ``create_email_sender``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import boto3
import resend
from botocore.exceptions import BotoCoreError, ClientError
from resend.exceptions import ResendError

logger = logging.getLogger(__name__)

DEFAULT_FROM_NAME = 'Tart'
DEFAULT_AWS_REGION = 'us-east-1'
CHARSET = 'UTF-8'

Recipients = Union[str, Sequence[str]]


class EmailSenderError(Exception):
    """Base exception for email sending operations"""
    pass


class EmailValidationError(EmailSenderError):
    """Message is missing a required field"""
    pass


class EmailConfigurationError(EmailSenderError):
    """Sender identity or credentials are not configured"""
    pass


class EmailDeliveryError(EmailSenderError):
    """Vendor rejected the message; ``provider_error`` keeps its payload"""

    def __init__(self, message: str, provider_error: Any = None):
        super().__init__(message)
        self.provider_error = provider_error


@dataclass
class EmailMessage:
    """A validated outgoing email"""
    to: List[str]
    subject: str
    html: Optional[str] = None
    text: Optional[str] = None


def format_from_address(name: Optional[str], address: Optional[str], setting: str) -> str:
    if not address:
        raise EmailConfigurationError(f"{setting} is not configured")
    return f"{name or DEFAULT_FROM_NAME} <{address}>"


class EmailSender(ABC):
    """Common contract of the vendor senders"""

    provider = 'base'

    def send_email(self,
                   to: Optional[Recipients] = None,
                   subject: Optional[str] = None,
                   html: Optional[str] = None,
                   text: Optional[str] = None) -> Any:
        """
        Send one email

        Args:
            to: Single address or list of addresses
            subject: Subject line
            html: Optional HTML body
            text: Optional plain text body

        Returns:
            Vendor response payload

        Raises:
            EmailValidationError: ``to`` or ``subject`` missing
            EmailConfigurationError: sender identity or credentials missing
            EmailDeliveryError: vendor reported an error
        """
        message = self.build_message(to, subject, html, text)
        logger.info(f"Sending email via {self.provider} to {len(message.to)} recipient(s)")
        return self._deliver(message)

    @staticmethod
    def build_message(to: Optional[Recipients],
                      subject: Optional[str],
                      html: Optional[str] = None,
                      text: Optional[str] = None) -> EmailMessage:
        if not to:
            raise EmailValidationError('Missing "to"')
        if not subject:
            raise EmailValidationError('Missing "subject"')
        recipients = [to] if isinstance(to, str) else list(to)
        return EmailMessage(to=recipients, subject=subject, html=html or None, text=text or None)

    @abstractmethod
    def _deliver(self, message: EmailMessage) -> Any:
        ...


class ResendEmailSender(EmailSender):
    """Sender backed by the Resend SDK"""

    provider = 'resend'

    def __init__(self,
                 api_key: Optional[str] = None,
                 from_address: Optional[str] = None,
                 from_name: Optional[str] = DEFAULT_FROM_NAME,
                 client: Any = None):
        self.api_key = api_key
        self.from_address = from_address
        self.from_name = from_name
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise EmailConfigurationError('RESEND_API_KEY is not configured')
            resend.api_key = self.api_key
            self._client = resend.Emails
        return self._client

    def _deliver(self, message: EmailMessage) -> Any:
        client = self._get_client()
        params: Dict[str, Any] = {
            'from': format_from_address(self.from_name, self.from_address, 'EMAIL_FROM_ADDRESS'),
            'to': message.to,
            'subject': message.subject,
        }
        if message.html:
            params['html'] = message.html
        if message.text:
            params['text'] = message.text

        try:
            return client.send(params)
        except ResendError as e:
            detail = getattr(e, 'message', None) or str(e)
            logger.error(f"Resend send error: {detail}")
            raise EmailDeliveryError(f"Resend send error: {detail}", provider_error=e) from e


class SesEmailSender(EmailSender):
    """Sender backed by AWS SES through boto3"""

    provider = 'ses'

    def __init__(self,
                 sender: Optional[str] = None,
                 from_name: Optional[str] = DEFAULT_FROM_NAME,
                 region: Optional[str] = DEFAULT_AWS_REGION,
                 client: Any = None):
        self.sender = sender
        self.from_name = from_name
        self.region = region or DEFAULT_AWS_REGION
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client('ses', region_name=self.region)
        return self._client

    def _deliver(self, message: EmailMessage) -> Any:
        source = format_from_address(self.from_name, self.sender, 'SES_SENDER')

        body: Dict[str, Any] = {}
        if message.html:
            body['Html'] = {'Data': message.html, 'Charset': CHARSET}
        if message.text:
            body['Text'] = {'Data': message.text, 'Charset': CHARSET}
        if not body:
            # SES requires at least one body part
            body['Text'] = {'Data': '', 'Charset': CHARSET}

        try:
            return self._get_client().send_email(
                Source=source,
                Destination={'ToAddresses': message.to},
                Message={
                    'Subject': {'Data': message.subject, 'Charset': CHARSET},
                    'Body': body,
                },
            )
        except ClientError as e:
            error = e.response.get('Error', {})
            detail = error.get('Message') or str(e)
            logger.error(f"SES send error: {detail}")
            raise EmailDeliveryError(f"SES send error: {detail}", provider_error=error) from e
        except BotoCoreError as e:
            logger.error(f"SES send error: {e}")
            raise EmailDeliveryError(f"SES send error: {e}", provider_error=e) from e


def create_email_sender(settings: Mapping[str, Any]) -> EmailSender:
    """
    Build the sender selected by ``EMAIL_PROVIDER``

    Accepts any mapping (Flask ``app.config``, a plain dict).
    """
    provider = (settings.get('EMAIL_PROVIDER') or 'resend').strip().lower()

    if provider == 'resend':
        return ResendEmailSender(
            api_key=settings.get('RESEND_API_KEY'),
            from_address=settings.get('EMAIL_FROM_ADDRESS'),
            from_name=settings.get('EMAIL_FROM_NAME') or DEFAULT_FROM_NAME,
        )
    if provider == 'ses':
        return SesEmailSender(
            sender=settings.get('SES_SENDER'),
            from_name=settings.get('SES_FROM_NAME') or DEFAULT_FROM_NAME,
            region=settings.get('AWS_REGION') or DEFAULT_AWS_REGION,
        )

    raise EmailConfigurationError(f"Unknown EMAIL_PROVIDER '{provider}'")
