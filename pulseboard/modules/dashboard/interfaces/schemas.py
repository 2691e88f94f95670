"""Dashboard API schemas."""

from pydantic import BaseModel, Field


class ChatMessageRequest(BaseModel):
    message: str = Field(..., description="用户消息")


class ChatMessageResponse(BaseModel):
    reply: str = Field(..., description="助手回复")
    messages_sent: int = Field(..., description="本会话已发送消息数")
    messages_remaining: int = Field(..., description="剩余可发送消息数")
    tokens_used: int = Field(..., description="估算已用 token 数")
