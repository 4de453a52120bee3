"""
Chat endpoint schemas. The chat client speaks camelCase JSON.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from anchor.knowledge.schemas import SourceCitation


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatTurn(_CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(_CamelModel):
    message: str = ""
    file_content: Optional[str] = None
    file_name: Optional[str] = None
    history: List[ChatTurn] = Field(default_factory=list)


class ChatResponse(_CamelModel):
    response: str
    used_expert_knowledge: bool
    response_source: Literal["knowledge_base", "general_ai"]
    sources: List[SourceCitation] = Field(default_factory=list)
