from datetime import timedelta

import sqlalchemy as sa

from clubhub.core.config import settings
from clubhub.core.security import now_utc
from clubhub.db.session import SessionLocal


def main():
    db = SessionLocal()
    try:
        cutoff = now_utc() - timedelta(days=settings.TOKEN_RETENTION_DAYS)

        deleted_refresh = db.execute(sa.text("""
            DELETE FROM refresh_tokens
            WHERE
              (revoked_at IS NOT NULL AND revoked_at < :cutoff)
              OR
              (expires_at < :cutoff)
        """), {"cutoff": cutoff}).rowcount

        deleted_verification = db.execute(sa.text("""
            DELETE FROM email_verification_tokens
            WHERE
              (used_at IS NOT NULL AND used_at < :cutoff)
              OR
              (expires_at < :cutoff)
        """), {"cutoff": cutoff}).rowcount

        deleted_reset = db.execute(sa.text("""
            DELETE FROM password_reset_tokens
            WHERE
              (used_at IS NOT NULL AND used_at < :cutoff)
              OR
              (expires_at < :cutoff)
        """), {"cutoff": cutoff}).rowcount

        db.commit()
        print(
            "ok: cleanup finished "
            f"(refresh_tokens={deleted_refresh}, "
            f"email_verification_tokens={deleted_verification}, "
            f"password_reset_tokens={deleted_reset})"
        )
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
