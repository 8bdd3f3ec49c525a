from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

class CurrentUser(BaseModel):
    user_id: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class ReorderResult(BaseModel):
    success: bool = True
