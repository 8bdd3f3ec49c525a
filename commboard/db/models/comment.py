from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Text, func
from sqlalchemy.orm import relationship
from commboard.db.base import Base

class BoardComment(Base):
    __tablename__ = "board_comments"

    id = Column(String, primary_key=True, index=True)
    board_id = Column(String, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    commenter_name = Column(String, nullable=False)
    commenter_image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    is_edited = Column(Boolean, nullable=False, default=False, server_default="false")

    board = relationship("Board", back_populates="comments")
