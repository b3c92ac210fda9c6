"""
NLU provider result model.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class NLUResult(BaseModel):
    """What the NLU provider made of one user utterance."""

    fulfillment_text: str = ""
    fulfillment_data: Optional[Dict[str, Any]] = None
    fulfillment_messages: List[Dict[str, Any]] = Field(default_factory=list)
    action: Optional[str] = None
    contexts: List[Dict[str, Any]] = Field(default_factory=list)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    resolved_query: Optional[str] = None
    intent_name: Optional[str] = None

    @field_validator("fulfillment_text", mode="before")
    @classmethod
    def none_text_as_empty(cls, v):
        return v or ""

    @field_validator("action", mode="before")
    @classmethod
    def blank_action_as_none(cls, v):
        # Dialogflow reports "no action" as an empty string
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_action(self) -> bool:
        return self.action is not None
