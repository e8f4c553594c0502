from datetime import datetime
from food_reviews import db


class QrScan(db.Model):
    """One visit through the printed QR code."""
    __tablename__ = 'qr_scans'

    id = db.Column(db.Integer, primary_key=True)
    scanned_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    operating_system = db.Column(db.String(20), nullable=True)
    browser = db.Column(db.String(20), nullable=True)
    device_type = db.Column(db.String(20), nullable=True)
    user_agent = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    def __repr__(self):
        return f'<QrScan {self.scanned_at} {self.device_type}>'
