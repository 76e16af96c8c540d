"""Delete password reset codes past their expiry."""
import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.models.password_reset import PasswordReset


def purge_expired_reset_codes(db: Session) -> int:
    deleted = db.query(PasswordReset).filter(
        PasswordReset.expires_at <= datetime.now(timezone.utc),
    ).delete(synchronize_session=False)
    db.commit()
    return deleted


def run_reset_cleanup_job() -> None:
    """Scheduled entry point; code validity never depends on this having run."""
    db: Session = SessionLocal()
    try:
        deleted = purge_expired_reset_codes(db)
        if deleted:
            logging.getLogger("uvicorn.error").info("Reset cleanup: deleted %d expired reset code(s).", deleted)
    finally:
        db.close()
