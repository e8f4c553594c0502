"""
Email service for the public contact form, sent via the Brevo API.

Every message is logged to ``contact_messages`` whether or not delivery
succeeds, so nothing a visitor sends is lost when Brevo is down or the API
key is missing.
"""

from flask import current_app, render_template
import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException
from sqlalchemy.exc import SQLAlchemyError

from food_reviews.errors import StoreError
from food_reviews.models import ContactMessage

SUBJECT_PREFIX = '[FOOD REVIEW]'


class EmailService:
    """Service for relaying contact messages through Brevo."""

    def __init__(self, session, api_key=None, owner_email=None):
        self.session = session
        self.api_key = api_key
        self.owner_email = owner_email
        self._api_instance = None

    @classmethod
    def from_config(cls, session, config):
        return cls(session, api_key=config.get('BREVO_API_KEY'), owner_email=config.get('CONTACT_EMAIL'))

    def is_configured(self) -> bool:
        return bool(self.api_key and self.owner_email)

    @property
    def api_instance(self):
        """Get or create Brevo API instance."""
        if self._api_instance is None:
            configuration = sib_api_v3_sdk.Configuration()
            configuration.api_key['api-key'] = self.api_key
            self._api_instance = sib_api_v3_sdk.TransactionalEmailsApi(
                sib_api_v3_sdk.ApiClient(configuration)
            )
        return self._api_instance

    def _save(self, message):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Failed to log contact message: {e}")
            raise StoreError('Failed to save message') from e
        return message

    def send_contact_message(self, name: str, email: str, subject: str, message: str) -> dict:
        """
        Forward a visitor's message to the site owner.

        Returns:
            dict with 'success', 'message_id', and 'error' keys
        """
        result = {
            'success': False,
            'message_id': None,
            'error': None
        }

        contact = ContactMessage(
            sender_name=name,
            sender_email=email,
            subject=f'{SUBJECT_PREFIX} {subject}',
            message=message,
            status='pending'
        )
        self.session.add(contact)

        if not self.is_configured():
            current_app.logger.warning("Contact email not configured - message stored but not sent")
            contact.status = 'not_configured'
            self._save(contact)
            result['error'] = 'Email delivery is not configured'
            return result

        html_content = render_template('emails/contact.html', contact=contact)

        try:
            send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
                sender={"name": "Food Reviews", "email": self.owner_email},
                to=[{"email": self.owner_email}],
                reply_to={"email": email, "name": name},
                subject=contact.subject,
                html_content=html_content
            )
            api_response = self.api_instance.send_transac_email(send_smtp_email)

            contact.brevo_message_id = api_response.message_id
            contact.status = 'sent'
            result['success'] = True
            result['message_id'] = api_response.message_id

        except ApiException as e:
            contact.status = 'failed'
            contact.error_message = str(e)
            result['error'] = str(e)
            current_app.logger.error(f"Brevo API error: {e}")

        except Exception as e:
            contact.status = 'failed'
            contact.error_message = str(e)
            result['error'] = str(e)
            current_app.logger.error(f"Email send error: {e}")

        self._save(contact)
        return result
