from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.ideaboard.models import Base, User

if TYPE_CHECKING:
    from app.ideaboard.modules.ideas.models import Idea


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        # One vote per (user, idea); concurrent toggles rely on this, not on app-level checks.
        UniqueConstraint("user_id", "idea_id", name="uq_votes_user_id_idea_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    idea_id: Mapped[int] = mapped_column(ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    idea: Mapped["Idea"] = relationship("Idea", back_populates="votes")
    user: Mapped[User] = relationship(User)
