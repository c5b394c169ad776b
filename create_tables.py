# create_tables.py
"""Create the schema and a default admin account.

Reads DATABASE_URL and the other settings from the environment / .env.
The admin password comes from ADMIN_PASSWORD; without it the admin is
created with no password and must be given one before anyone can log in
(outside development with passwordless login enabled).
"""
import os

from dotenv import load_dotenv

from crmhub.config.settings import load_settings
from crmhub.database import build_engine, build_session_factory, create_tables
from crmhub.models.user import User, UserRole, UserStatus
from crmhub.utils.security import hash_password

ADMIN_EMAIL = "admin@example.com"


def create_default_admin(session_factory, settings) -> None:
    db = session_factory()
    try:
        if db.query(User.id).filter(User.email == ADMIN_EMAIL).first():
            print("Admin user already exists")
            return

        password = os.getenv("ADMIN_PASSWORD")
        db.add(
            User(
                email=ADMIN_EMAIL,
                first_name="System",
                last_name="Administrator",
                hashed_password=hash_password(password, settings.bcrypt_rounds) if password else None,
                role=UserRole.ADMIN.value,
                status=UserStatus.ACTIVE.value,
            )
        )
        db.commit()
        print(f"Default admin user created: {ADMIN_EMAIL}")
        if not password:
            print("No ADMIN_PASSWORD given; the admin has no password set")
    finally:
        db.close()


def main():
    load_dotenv()
    settings = load_settings()
    engine = build_engine(settings)

    create_tables(engine)
    print("All tables created")

    create_default_admin(build_session_factory(engine), settings)


if __name__ == "__main__":
    main()
