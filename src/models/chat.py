from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.portfolio import Profile


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional here so an empty message reaches the relay and gets its 400
    message: Optional[str] = None
    portfolio: Profile = Field(default_factory=Profile)
    conversation_history: list[ChatTurn] = Field(
        default_factory=list, alias="conversationHistory"
    )


class ChatResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    error: str
