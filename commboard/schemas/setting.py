from typing import Any, Dict
from pydantic import BaseModel, Field

class SettingField(BaseModel):
    label: str
    type: str
    min: int
    max: int

class SettingsRead(BaseModel):
    settings: Dict[str, str]
    setting_schema: Dict[str, SettingField] = Field(alias="schema")

    class Config:
        populate_by_name = True

class SettingUpdate(BaseModel):
    key: Any = None
    value: Any = None

class SettingUpdated(BaseModel):
    success: bool = True
    key: str
    value: str
