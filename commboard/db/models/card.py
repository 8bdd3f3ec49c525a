from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from commboard.db.base import Base

class Card(Base):
    __tablename__ = "cards"

    id = Column(String, primary_key=True, index=True)
    board_id = Column(String, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    order = Column("position", Integer, nullable=False, default=0)
    label = Column(String(100), nullable=True)
    image_url = Column(String, nullable=True)
    audio_url = Column(String, nullable=True)
    color = Column(String, nullable=True)
    category = Column(String, nullable=True)
    template_key = Column(String, nullable=True)  # media resolved from the template catalog
    source_board_id = Column(String, nullable=True)  # inherited from a public board

    board = relationship("Board", back_populates="cards")
