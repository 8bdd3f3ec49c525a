from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

class BoardCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class BoardUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class BoardClone(BaseModel):
    template_board_id: Optional[str] = None
    new_board_name: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class BoardRead(BaseModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    is_public: bool = False
    created_at: Optional[datetime] = None
    creator_name: Optional[str] = None
    creator_image_url: Optional[str] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class PublicBoardRead(BoardRead):
    like_count: int = 0
    comment_count: int = 0
    card_count: int = 0
    is_liked_by_user: bool = False

class BoardCloneResult(BaseModel):
    board: BoardRead
    card_count: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True
