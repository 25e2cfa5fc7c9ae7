"""
User model - people who take tests and administrators who author questions.

Users authenticate with email + password and receive a bearer token whose
role claim ("admin" or "user") gates the admin API.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Text, DateTime, String
from sqlalchemy.orm import relationship
from expertcheck.database import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(Base):
    """SQLAlchemy model for the users table."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Unique user identifier")
    username = Column(String(100), nullable=False, unique=True,
                      doc="Display name, unique across users")
    email = Column(String(255), nullable=False, unique=True,
                   doc="Login email, unique across users")
    password_hash = Column(Text, nullable=False,
                           doc="Hex-encoded PBKDF2 hash of the password")
    password_salt = Column(String(64), nullable=False,
                           doc="Per-user salt used for the password hash")
    role = Column(String(20), nullable=False, default=ROLE_USER,
                  doc="Authorization role: admin | user")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        doc="When the account was registered")

    # Relationship: one user has many completed tests
    test_results = relationship("TestResult", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
