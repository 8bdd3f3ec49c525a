from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

class CommentWrite(BaseModel):
    content: Optional[str] = None

class CommentRead(BaseModel):
    id: str
    board_id: str
    user_id: str
    content: str
    commenter_name: str
    commenter_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_edited: bool = False

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class LikeStatus(BaseModel):
    liked: bool
    like_count: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True
