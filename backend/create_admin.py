"""
Create (or promote) an administrator account directly in the database.

Usage:
    python create_admin.py <username> <email> <password>

An existing account with the same email is promoted to admin and gets the
new password.
"""

import sys
from datetime import datetime, timezone

from expertcheck.database import SessionLocal, create_tables
from expertcheck.models.user import User, ROLE_ADMIN
from expertcheck.security import hash_password


def main():
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(1)

    username, email, password = sys.argv[1], sys.argv[2].strip().lower(), sys.argv[3]
    create_tables()

    db = SessionLocal()
    try:
        password_hash, salt = hash_password(password)
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.role = ROLE_ADMIN
            user.password_hash = password_hash
            user.password_salt = salt
            action = "Promoted"
        else:
            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                password_salt=salt,
                role=ROLE_ADMIN,
                created_at=datetime.now(timezone.utc)
            )
            db.add(user)
            action = "Created"
        db.commit()
        print(f"{action} admin {user.email} (id={user.id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
