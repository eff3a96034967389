"""Messages the candidate's browser sends over the room socket."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class BeginMessage(BaseModel):
    type: Literal["begin"]


class MediaMessage(BaseModel):
    type: Literal["media"]
    granted: bool


class VisibilityMessage(BaseModel):
    type: Literal["visibility"]
    hidden: bool


class BlurMessage(BaseModel):
    type: Literal["blur"]


class FullscreenMessage(BaseModel):
    type: Literal["fullscreen"]
    active: bool


class FrameMessage(BaseModel):
    type: Literal["frame"]
    timestamp: float
    image: str  # base64 JPEG, optionally a data URL


class AudioMessage(BaseModel):
    type: Literal["audio"]
    data: str  # base64 PCM16


class EndMessage(BaseModel):
    type: Literal["end"]


RoomMessage = Annotated[
    Union[
        BeginMessage,
        MediaMessage,
        VisibilityMessage,
        BlurMessage,
        FullscreenMessage,
        FrameMessage,
        AudioMessage,
        EndMessage,
    ],
    Field(discriminator="type"),
]

room_message_adapter = TypeAdapter(RoomMessage)
