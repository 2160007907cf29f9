"""Typed view of the upstream's streaming response envelope.

Only the fields the relay reads are modeled; everything else is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class UpstreamContentItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "text"
    text: str | None = None


class UpstreamMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    content: list[UpstreamContentItem] | None = None


class UpstreamChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: UpstreamMessage | None = None
    finish_reason: str | None = None


class UpstreamResponsePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    choices: list[UpstreamChoice] = Field(min_length=1)


class UpstreamEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    response_payload: UpstreamResponsePayload

    @property
    def first_choice(self) -> UpstreamChoice:
        return self.response_payload.choices[0]

    def text(self) -> str:
        """Concatenate the first choice's text items in array order."""
        message = self.first_choice.message
        if message is None:
            return ""
        return "".join(
            item.text for item in message.content or () if item.type == "text" and item.text
        )
