"""
Models used by the test suite.
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for test models."""


class User(Base):
    """User with a hook restricting notes to their own."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    notes: Mapped[list["Note"]] = relationship(back_populates="user")

    def restrict_Notes_resultset(self, unrestricted_rs):
        return unrestricted_rs.search(user_id=self.id)

    def __repr__(self) -> str:
        return f"<User {self.name}>"


class Note(Base):
    """Note owned by a user."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    user: Mapped[User] = relationship(back_populates="notes")


class Tag(Base):
    """Model nobody restricts."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
