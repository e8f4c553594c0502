"""
Rate limiting model for public form submissions.

Keeps the contact form from being used to flood the owner's inbox.
"""

from datetime import datetime, timedelta
from food_reviews import db


class RateLimit(db.Model):
    """One recorded action by a client key (usually an IP address)."""
    __tablename__ = 'rate_limits'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False, index=True)  # e.g., 'contact'
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @classmethod
    def _in_window(cls, key, action, window_start):
        return cls.query.filter(
            cls.key == key.lower(),
            cls.action == action,
            cls.timestamp >= window_start
        )

    @classmethod
    def check_rate_limit(cls, key, action, max_requests, window_minutes):
        """
        Check whether ``key`` may perform ``action`` again.

        Returns:
            tuple: (is_allowed: bool, retry_after_seconds: int or None)
        """
        now = datetime.utcnow()
        window_start = now - timedelta(minutes=window_minutes)
        recent = cls._in_window(key, action, window_start)

        if recent.count() < max_requests:
            return (True, None)

        oldest = recent.order_by(cls.timestamp.asc()).first()
        retry_after = (oldest.timestamp + timedelta(minutes=window_minutes) - now).total_seconds()
        return (False, max(0, int(retry_after)))

    @classmethod
    def record_request(cls, key, action):
        db.session.add(cls(key=key.lower(), action=action, timestamp=datetime.utcnow()))
        db.session.commit()

    @classmethod
    def cleanup_old_records(cls, older_than_minutes=60):
        """Delete records older than ``older_than_minutes``. Returns the count removed."""
        cutoff = datetime.utcnow() - timedelta(minutes=older_than_minutes)
        deleted = cls.query.filter(cls.timestamp < cutoff).delete()
        db.session.commit()
        return deleted

    def __repr__(self):
        return f'<RateLimit {self.action} {self.key}>'
