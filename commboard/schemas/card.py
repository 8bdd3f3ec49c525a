from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from commboard.core.validation import MAX_CARD_POSITION

class CardData(BaseModel):
    label: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None
    template_key: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=0, le=MAX_CARD_POSITION)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class CardCreate(CardData):
    board_id: Optional[str] = None

class CardBatchCreate(BaseModel):
    board_id: Optional[str] = None
    cards: List[CardData] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class CardUpdate(BaseModel):
    label: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None
    board_id: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class CardOrder(BaseModel):
    card_id: str
    position: int = Field(ge=0, le=MAX_CARD_POSITION)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class CardReorder(BaseModel):
    board_id: str
    card_orders: List[CardOrder]

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class CardRead(BaseModel):
    id: str
    board_id: str
    order: int
    label: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None
    template_key: Optional[str] = None
    source_board_id: Optional[str] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
