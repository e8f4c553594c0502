from datetime import datetime
from flask import current_app

from food_reviews.errors import StoreError
from food_reviews.utils.user_agent import client_ip, parse_user_agent


class QrScanService:
    """Best-effort recording of QR code visits."""

    def __init__(self, store):
        self.store = store

    def record(self, headers, remote_addr) -> bool:
        """Store one scan. Never raises on store failure; returns False instead."""
        user_agent = headers.get('User-Agent', '')
        operating_system, browser, device_type = parse_user_agent(user_agent)

        try:
            self.store.record_qr_scan(
                scanned_at=datetime.utcnow(),
                operating_system=operating_system,
                browser=browser,
                device_type=device_type,
                user_agent=user_agent,
                ip_address=client_ip(headers, remote_addr)
            )
        except StoreError as e:
            current_app.logger.error(f"Failed to record QR scan: {e}")
            return False

        current_app.logger.info(f"QR scan recorded: {operating_system}/{browser}/{device_type}")
        return True

    def count(self) -> int:
        return self.store.count_qr_scans()
