import argparse

import sqlalchemy as sa

from clubhub.core.constants import ROLE_ADMIN
from clubhub.db.session import SessionLocal
from clubhub.services.audit import audit


def main():
    parser = argparse.ArgumentParser(description="Give an existing account the ADMIN role.")
    parser.add_argument("email")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        user_id = db.execute(sa.text("""
            UPDATE users
            SET role=:admin, updated_at=now()
            WHERE email=:e
            RETURNING id
        """), {"admin": ROLE_ADMIN, "e": args.email.strip().lower()}).scalar()
        if user_id is None:
            raise SystemExit(f"no user with email {args.email}")
        audit(db, None, "user", user_id, "promoted_admin", {})
        db.commit()
        print(f"ok: user {user_id} is now {ROLE_ADMIN}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
