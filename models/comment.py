from sqlalchemy import Column, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base

MAX_CONTENT_LENGTH = 500


class Comment(BaseModel, Base):
    __tablename__ = "comments"

    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(String(MAX_CONTENT_LENGTH), nullable=False)
    commenter_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    post = relationship("Post", back_populates="comments")
    commenter = relationship("User")

    __table_args__ = (
        CheckConstraint(f"length(content) <= {MAX_CONTENT_LENGTH}", name="ck_comments_content_length"),
    )
