"""
Retry booking confirmation emails left pending in the notification outbox.
Run periodically (e.g. from cron) when NOTIFICATION_DELIVERY is "background"
or after email transport outages.
"""
import argparse
import logging
import sys
import os

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.db.session import SessionLocal
from app.services.notification_service import dispatch_pending_notifications, get_email_sender

logger = logging.getLogger("dispatch_notifications")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--limit", type=int, default=100, help="maximum emails to attempt in this pass")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    db = SessionLocal()
    try:
        sent, failed = dispatch_pending_notifications(db, get_email_sender(), limit=args.limit)
    finally:
        db.close()

    logger.info(f"Sent {sent}, failed {failed}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
