from sqlalchemy import Column, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Post(BaseModel, Base):
    __tablename__ = "posts"

    title = Column(String(255), nullable=False)
    text = Column(Text, nullable=False)
    # Owner; stamped from the access token, never from the request body
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    author = relationship("User", back_populates="posts")
    # Comments go away with their post
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )
