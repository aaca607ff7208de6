"""Shared helpers for tests: a seeded in-memory database and user factories."""

from pydantic import SecretStr
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.core.database import use_immediate_transactions
from app.core.permissions import RoleName
from app.core.security import hash_password
from app.models import Base, Role, User, UserRole
from app.services.catalog import seed_catalog

PASSWORD = "correct-horse-battery"
# Hashed once; bcrypt is deliberately slow.
PASSWORD_HASH = hash_password(PASSWORD)

TEST_SECRET = "test-signing-key-0123456789abcdef0123456789"


def make_settings(**overrides) -> Settings:
    values = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": SecretStr(TEST_SECRET),
        "SEED_CATALOG_ON_STARTUP": False,
    }
    values.update(overrides)
    return Settings(**values)


def new_session(seed: bool = True) -> Session:
    """Session on a fresh in-memory database with all tables created (and the catalog seeded)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    if seed:
        seed_catalog(session)
    return session


def role_id(session: Session, name: RoleName) -> int:
    return session.query(Role.id).filter(Role.name == name.value).scalar()


def make_user(
    session: Session,
    email: str,
    *roles: RoleName,
    is_active: bool = True,
) -> User:
    """Insert a user holding the given roles (none when omitted)."""
    user = User(email=email.lower(), password_hash=PASSWORD_HASH, is_active=is_active)
    session.add(user)
    session.flush()
    for role in roles:
        session.add(UserRole(user_id=user.id, role_id=role_id(session, role)))
    session.commit()
    return user


def role_names(session: Session, user_id: int) -> set[str]:
    rows = (
        session.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .all()
    )
    return {name for (name,) in rows}


def file_database(path: str) -> tuple[Engine, sessionmaker]:
    """
    Seeded SQLite database in a file, for tests that need several sessions (and
    threads) contending on the same data. Transactions use BEGIN IMMEDIATE, as the
    application engine does for SQLite.
    """
    engine = use_immediate_transactions(
        create_engine(
            f"sqlite:///{path}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = factory()
    try:
        seed_catalog(session)
    finally:
        session.close()
    return engine, factory
