from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.ideaboard.models import Base, User

if TYPE_CHECKING:
    from app.ideaboard.modules.ideas.models import Idea


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("idx_comments_idea_id", "idea_id", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    idea_id: Mapped[int] = mapped_column(ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    idea: Mapped["Idea"] = relationship("Idea", back_populates="comments")
    user: Mapped[User] = relationship(User, lazy="joined")
