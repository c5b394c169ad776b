"""
Database Seeding Script
Creates database tables and populates them with demo data
"""

import os
from datetime import timedelta

from dotenv import load_dotenv

from crmhub.config.settings import load_settings
from crmhub.database import build_engine, build_session_factory, create_tables
from crmhub.models import Deal, Employee, Lead, Task, User
from crmhub.utils.datetime_utils import utcnow
from crmhub.utils.security import hash_password

# "manager" references another demo user by email
DEMO_USERS = [
    {"email": "admin@example.com", "first_name": "Admin", "last_name": "User", "role": "admin", "manager": None},
    {"email": "manager@example.com", "first_name": "Manager", "last_name": "Smith", "role": "manager", "manager": None},
    {"email": "employee@example.com", "first_name": "John", "last_name": "Doe", "role": "employee", "manager": "manager@example.com"},
    {"email": "jane@example.com", "first_name": "Jane", "last_name": "Smith", "role": "employee", "manager": "manager@example.com"},
]

DEMO_EMPLOYEES = [
    {"email": "manager@example.com", "department": "Sales", "performance_score": 88},
    {"email": "employee@example.com", "department": "Sales", "performance_score": 74},
    {"email": "jane@example.com", "department": "Marketing", "performance_score": 81},
]

DEMO_LEADS = [
    {"name": "Priya Shah", "company": "Acme Corp", "email": "priya@acme.example.com", "stage": "lead", "assignee": "employee@example.com"},
    {"name": "Tom Baker", "company": "Globex", "email": "tom@globex.example.com", "stage": "negotiation", "assignee": "jane@example.com"},
    {"name": "Ana Lima", "company": "Initech", "email": "ana@initech.example.com", "stage": "closed", "assignee": "manager@example.com"},
]

DEMO_DEALS = [
    {"title": "Acme annual licence", "company": "Acme Corp", "value": 12000, "stage": "negotiation", "assignee": "employee@example.com"},
    {"title": "Initech rollout", "company": "Initech", "value": 30000, "stage": "closed", "assignee": "manager@example.com"},
]

DEMO_TASKS = [
    {"title": "Follow up with Acme", "priority": "high", "status": "todo", "assignee": "employee@example.com", "due_in_days": 2},
    {"title": "Prepare Globex proposal", "priority": "medium", "status": "in-progress", "assignee": "jane@example.com", "due_in_days": 5},
    {"title": "Quarterly pipeline review", "priority": "low", "status": "done", "assignee": "manager@example.com", "due_in_days": -1},
]


def seed_demo_users(db, settings):
    """Create demo users, then wire up the manager hierarchy"""
    password = os.getenv("DEMO_PASSWORD")
    hashed = hash_password(password, settings.bcrypt_rounds) if password else None

    users = {}
    for user_data in DEMO_USERS:
        user = db.query(User).filter(User.email == user_data["email"]).first()
        if user:
            print(f"[SKIP] User {user_data['email']} already exists")
        else:
            user = User(
                email=user_data["email"],
                first_name=user_data["first_name"],
                last_name=user_data["last_name"],
                role=user_data["role"],
                hashed_password=hashed,
            )
            db.add(user)
            print(f"[SUCCESS] Created user: {user_data['email']} ({user_data['role']})")
        users[user_data["email"]] = user
    db.flush()

    for user_data in DEMO_USERS:
        if user_data["manager"]:
            users[user_data["email"]].manager_id = users[user_data["manager"]].id

    db.commit()
    if not password:
        print("No DEMO_PASSWORD given; demo users can only log in with passwordless development login")
    return users


def seed_demo_records(db, users):
    if db.query(Lead.id).first():
        print("[SKIP] CRM data already present")
        return

    for data in DEMO_EMPLOYEES:
        if not db.query(Employee.id).filter(Employee.user_id == users[data["email"]].id).first():
            db.add(Employee(user_id=users[data["email"]].id, department=data["department"],
                            performance_score=data["performance_score"]))

    for data in DEMO_LEADS:
        db.add(Lead(name=data["name"], company=data["company"], email=data["email"],
                    stage=data["stage"], assigned_to=users[data["assignee"]].id))

    for data in DEMO_DEALS:
        db.add(Deal(title=data["title"], company=data["company"], value=data["value"],
                    stage=data["stage"], assigned_to=users[data["assignee"]].id))

    now = utcnow()
    for data in DEMO_TASKS:
        db.add(Task(title=data["title"], priority=data["priority"], status=data["status"],
                    completed=data["status"] == "done", assigned_to=users[data["assignee"]].id,
                    due_date=now + timedelta(days=data["due_in_days"])))

    db.commit()
    print("[SUCCESS] Created demo employees, leads, deals and tasks")


def main():
    load_dotenv()
    settings = load_settings()
    engine = build_engine(settings)
    create_tables(engine)

    db = build_session_factory(engine)()
    try:
        users = seed_demo_users(db, settings)
        seed_demo_records(db, users)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print("\nDemo users:")
    for user_data in DEMO_USERS:
        print(f"  - {user_data['email']} ({user_data['role']})")


if __name__ == "__main__":
    main()
