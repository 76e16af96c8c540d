"""
Create an admin or technician account, or promote an existing account to that role.
Signup only ever creates customers, so staff accounts are provisioned here.

Run from project root:
  python scripts/create_staff_user.py admin@kickback.demo --role admin --password 'Password123!'
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy.orm import Session

from app.database import Base, SessionLocal, engine
from app.models.user import STAFF_ROLES, User, UserRole
from app.schemas.auth import PASSWORD_MIN_LENGTH


def create_or_promote_staff(
    db: Session,
    email: str,
    role: UserRole,
    password: str | None = None,
    first_name: str = "KickBack",
    last_name: str = "Staff",
    phone: str = "0000000000",
) -> tuple[User, bool]:
    """Returns (user, created). Existing users keep their password unless a new one is given."""
    if role not in STAFF_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(r.value for r in STAFF_ROLES)}")
    if password is not None and len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    created = user is None
    if created:
        if password is None:
            raise ValueError("A password is required for a new account")
        user = User(
            email=email,
            role=role,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            email_verified=True,
        )
        db.add(user)
    user.role = role
    user.is_active = True
    if password is not None:
        user.set_password(password)
    db.commit()
    db.refresh(user)
    return user, created


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("--role", choices=[r.value for r in STAFF_ROLES], default=UserRole.admin.value)
    parser.add_argument("--password", help="required when the account does not exist yet")
    parser.add_argument("--first-name", default="KickBack")
    parser.add_argument("--last-name", default="Staff")
    parser.add_argument("--phone", default="0000000000")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user, created = create_or_promote_staff(
            db,
            args.email,
            UserRole(args.role),
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            phone=args.phone,
        )
    except ValueError as e:
        parser.error(str(e))
    finally:
        db.close()
    print(f"{'Created' if created else 'Updated'} {user.role.value}: {user.email}")


if __name__ == "__main__":
    main()
