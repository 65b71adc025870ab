from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from ..database.base import AuditMixin, Base


class User(AuditMixin, Base):
    """
    SQLAlchemy model for a service user (name + email).
    """
    __tablename__ = "users"
    __table_args__ = (
        # one active user per email; deleted users release their address
        Index(
            "uq_users_email",
            "email",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r})>"
