"""Pydantic schemas for the inbound email webhook.

Mail providers name the same fields differently (SendGrid posts 'text',
Mailgun 'body-plain', direct callers 'body'); the aliases below accept all
of them.
"""

from typing import Optional

from pydantic import AliasChoices, AliasPath, BaseModel, ConfigDict, Field, field_validator


class InboundEmailPayload(BaseModel):
    """Decoded inbound email as handed over by a mail provider."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    from_address: str = Field(
        "",
        validation_alias=AliasChoices("from", "sender", AliasPath("envelope", "from")),
    )
    to_address: str = Field(
        "",
        validation_alias=AliasChoices("to", "recipient", AliasPath("envelope", "to")),
    )
    subject: str = ""
    body: str = Field(
        "",
        validation_alias=AliasChoices("body", "text", "body-plain", "stripped_text"),
    )

    @field_validator("from_address", "to_address", "subject", "body", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


class IngestionResponse(BaseModel):
    """Successful ingestion summary"""
    success: bool = True
    survey_id: str
    responses_processed: int = Field(..., description="Responses written by this reply")
    free_text_saved: bool = Field(..., description="Unattributed text stored as a comment")


class RepliesDisabledResponse(BaseModel):
    """Reply accepted but ignored because the survey takes no email replies"""
    success: bool = True
    survey_id: Optional[str] = None
    message: str = "Survey does not accept email replies"


class ErrorResponse(BaseModel):
    error: str
