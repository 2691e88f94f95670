"""Gateway API schemas."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Chat request: the whole conversation, oldest first."""

    messages: list[str] = Field(default_factory=list, description="对话历史")

    class Config:
        json_schema_extra = {"example": {"messages": ["What moved AAPL today?"]}}


class ChatResponse(BaseModel):
    reply: str = Field(..., description="助手回复")


class PanelDefaults(BaseModel):
    news_category: str
    country: str
    language: str
    trends_type: str
    trends_geo: str
    reddit_period: str
    symbol: str


class ClientConfigResponse(BaseModel):
    """Non-secret configuration for the page. Never carries provider keys."""

    defaults: PanelDefaults
    realtime_range: str
    realtime_interval: str
    page_sizes: dict[str, int]
    maps_script_path: str
