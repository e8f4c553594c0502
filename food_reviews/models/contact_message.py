from datetime import datetime
from food_reviews import db


class ContactMessage(db.Model):
    """Message sent through the public contact form."""
    __tablename__ = 'contact_messages'

    id = db.Column(db.Integer, primary_key=True)
    sender_name = db.Column(db.String(100), nullable=False)
    sender_email = db.Column(db.String(120), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)

    # Brevo tracking
    brevo_message_id = db.Column(db.String(100), nullable=True)

    # Status tracking
    status = db.Column(db.String(20), default='pending')  # pending, sent, failed, not_configured
    error_message = db.Column(db.Text, nullable=True)

    # Timestamps
    sent_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<ContactMessage from {self.sender_email}>'
