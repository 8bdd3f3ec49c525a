from sqlalchemy import Column, String, DateTime, Boolean, func
from sqlalchemy.orm import relationship
from commboard.db.base import Base

class Board(Base):
    __tablename__ = "boards"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    creator_name = Column(String, nullable=True)
    creator_image_url = Column(String, nullable=True)

    cards = relationship("Card", back_populates="board", cascade="all, delete-orphan")
    comments = relationship("BoardComment", back_populates="board", cascade="all, delete-orphan")
    likes = relationship("BoardLike", back_populates="board", cascade="all, delete-orphan")
