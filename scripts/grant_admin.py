# scripts/grant_admin.py
# usage: python -m scripts.grant_admin someone@example.com [more@example.com ...]
import sys

from ncc_portal.db.session import SessionLocal, engine, init_db
from ncc_portal.models import Identity
from ncc_portal.models.user import ROLE_ADMIN
from ncc_portal.services.roles import grant_role

def grant_admin(db, email):
    u = db.query(Identity).filter(Identity.email == email.strip().lower()).first()
    if not u:
        return f"SKIPPED {email} (no such identity, register first)"
    grant_role(db, u.id, ROLE_ADMIN)
    return f"GRANTED admin to {email} ({u.id})"

def main(argv):
    if not argv:
        print("usage: python -m scripts.grant_admin EMAIL [EMAIL ...]")
        return 2
    print("DB =", engine.url.render_as_string(hide_password=True))
    init_db()
    db = SessionLocal()
    try:
        for email in argv:
            print(grant_admin(db, email))
        db.commit()
    finally:
        db.close()
    return 0

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
