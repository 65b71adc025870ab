from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from ..database.base import AuditMixin, Base


class Country(AuditMixin, Base):
    """
    SQLAlchemy model for Country.

    `code` is the ISO-style 2-3 letter code, stored upper-case. It is unique
    among active rows only, so a soft-deleted code can be created again.
    """
    __tablename__ = "countries"
    __table_args__ = (
        Index(
            "uq_countries_code",
            "code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    code: Mapped[str] = mapped_column(String(3), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Country(id={self.id!r}, code={self.code!r})>"
