# app/models/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal


class Token(BaseModel):
    access_token: str
    token_type: str


class ActionRequest(BaseModel):
    action: Literal["approved", "cancelled", "canceled", "shown", "not_shown"]
    note: Optional[str] = Field(None, max_length=1000)


class NoticeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["success", "error"]
    message: str
    expires_in_seconds: int = Field(..., alias="expiresInSeconds")


class ActionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    notice: Optional[NoticeOut] = None
    note: str = ""
    panel_open: bool = Field(..., alias="panelOpen")
    revalidate: List[str] = Field(default_factory=list)
