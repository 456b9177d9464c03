"""
User model with role-based access.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from hiring.database import Base


class UserRole(str, enum.Enum):
    """
    - SUPER_ADMIN: platform operator, manages prompts and subscription plans
    - EMPLOYER_ADMIN: full access within their organization
    - RECRUITER: works the candidate pipeline within their organization
    """
    SUPER_ADMIN = "SUPER_ADMIN"
    EMPLOYER_ADMIN = "EMPLOYER_ADMIN"
    RECRUITER = "RECRUITER"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.RECRUITER, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    organization = relationship("Organization", back_populates="users")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN
