from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from commboard.db.base import Base

class BoardLike(Base):
    __tablename__ = "board_likes"

    id = Column(String, primary_key=True, index=True)
    board_id = Column(String, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    board = relationship("Board", back_populates="likes")

    __table_args__ = (
        UniqueConstraint("board_id", "user_id", name="uq_board_like_user"),
    )
