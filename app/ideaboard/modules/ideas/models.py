from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.ideaboard.models import Base, User

if TYPE_CHECKING:
    from app.ideaboard.modules.comments.models import Comment
    from app.ideaboard.modules.votes.models import Vote


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)


class Status(Base):
    __tablename__ = "statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)  # e.g. "Open", "Considering"
    classes: Mapped[str] = mapped_column(String(128), nullable=False, default="bg-gray-200")  # badge style
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)


class Idea(Base):
    __tablename__ = "ideas"
    __table_args__ = (
        Index("idx_ideas_category_id", "category_id"),
        Index("idx_ideas_status_id", "status_id"),
        Index("idx_ideas_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False)
    status_id: Mapped[int] = mapped_column(ForeignKey("statuses.id"), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    user: Mapped[User] = relationship(User, lazy="joined")
    category: Mapped[Category] = relationship(Category, lazy="joined")
    status: Mapped[Status] = relationship(Status, lazy="joined")

    # Cascades mirror the ON DELETE CASCADE foreign keys so ORM deletes and raw deletes agree.
    comments: Mapped[list["Comment"]] = relationship(
        "Comment",
        back_populates="idea",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.id",
    )
    votes: Mapped[list["Vote"]] = relationship(
        "Vote",
        back_populates="idea",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
