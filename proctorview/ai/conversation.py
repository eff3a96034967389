"""Voice conversation with the interviewer agent over the Gemini Live API."""
import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional, Protocol

import numpy as np
from google import genai
from google.genai import types

from proctorview.ai.script import InterviewScript
from proctorview.core.config import Settings
from proctorview.core.errors import ConversationStartError
from proctorview.utils.enums import ConversationEventType, Speaker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationEvent:
    type: ConversationEventType
    text: Optional[str] = None
    speaker: Optional[Speaker] = None
    audio: Optional[bytes] = None
    level: Optional[float] = None
    error: Optional[str] = None


Emit = Callable[[ConversationEvent], None]


class ConversationEngine(Protocol):
    async def start(self, script: InterviewScript, audio: AsyncIterator[bytes], emit: Emit) -> None:
        """Connect and return once the call is up; lifecycle events arrive through `emit`."""

    async def stop(self) -> None:
        """Hang up. Safe to call more than once and before `start` finishes."""


def rms_level(chunk: bytes) -> float:
    """Loudness of a PCM16 chunk in [0, 1]."""
    samples = np.frombuffer(chunk[: len(chunk) - len(chunk) % 2], dtype=np.int16)
    if samples.size == 0:
        return 0.0
    rms = float(np.sqrt(np.mean(np.square(samples.astype(np.float64)))))
    return min(1.0, rms / 32768.0)


class GeminiLiveConversation:
    def __init__(self, client: genai.Client, settings: Settings):
        self._client = client
        self._settings = settings
        self._stack = contextlib.AsyncExitStack()
        self._session = None
        self._tasks = []
        self._emit: Emit = lambda event: None
        self._stopped = False

    def _live_config(self, script: InterviewScript) -> types.LiveConnectConfig:
        return types.LiveConnectConfig(
            response_modalities=[types.Modality.AUDIO],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=self._settings.VOICE_NAME
                    )
                )
            ),
            system_instruction=types.Content(parts=[types.Part(text=script.instructions)]),
            tools=[
                types.Tool(
                    function_declarations=[
                        types.FunctionDeclaration(
                            name=script.end_call_function,
                            description="End the interview call once the closing line has been spoken.",
                        )
                    ]
                )
            ],
            input_audio_transcription=types.AudioTranscriptionConfig(),
            output_audio_transcription=types.AudioTranscriptionConfig(),
        )

    async def start(self, script: InterviewScript, audio: AsyncIterator[bytes], emit: Emit) -> None:
        if self._stopped:
            raise ConversationStartError("Conversation was stopped before it started")

        self._emit = emit
        self._end_call_function = script.end_call_function
        try:
            self._session = await self._stack.enter_async_context(
                self._client.aio.live.connect(
                    model=self._settings.LIVE_MODEL,
                    config=self._live_config(script),
                )
            )
        except Exception as exc:
            await self._close()
            raise ConversationStartError(f"Could not connect to interviewer: {exc}") from exc

        if self._stopped:
            await self._close()
            return

        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(self._pump_audio(audio), name="conversation-audio"),
            loop.create_task(self._receive(), name="conversation-receive"),
        ]
        try:
            await self._session.send_client_content(
                turns=types.Content(
                    role="user",
                    parts=[types.Part(text=f'Begin the interview now. Open with: "{script.first_message}"')],
                ),
                turn_complete=True,
            )
        except Exception as exc:
            await self.stop()
            raise ConversationStartError(f"Interviewer did not accept the script: {exc}") from exc

        emit(ConversationEvent(ConversationEventType.CALL_STARTED))

    async def _pump_audio(self, audio: AsyncIterator[bytes]) -> None:
        mime_type = f"audio/pcm;rate={self._settings.INPUT_SAMPLE_RATE}"
        try:
            async for chunk in audio:
                if self._stopped:
                    break
                await self._session.send_realtime_input(
                    audio=types.Blob(data=chunk, mime_type=mime_type)
                )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._stopped:
                logger.warning("Microphone stream to interviewer failed: %s", exc)

    async def _receive(self) -> None:
        try:
            while not self._stopped:
                received = False
                async for message in self._session.receive():
                    received = True
                    await self._handle(message)
                    if self._stopped:
                        return
                if not received:
                    # Stream drained with nothing in it: the far end hung up.
                    self._emit(ConversationEvent(ConversationEventType.CALL_ENDED))
                    return
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._stopped:
                self._emit(ConversationEvent(
                    ConversationEventType.ERROR,
                    error=f"{type(exc).__name__}: {exc}",
                ))

    async def _handle(self, message) -> None:
        data = getattr(message, "data", None)
        if data:
            self._emit(ConversationEvent(ConversationEventType.AUDIO, audio=data))
            self._emit(ConversationEvent(ConversationEventType.VOLUME, level=rms_level(data)))

        content = getattr(message, "server_content", None)
        if content is not None:
            for attr, speaker in (
                ("input_transcription", Speaker.CANDIDATE),
                ("output_transcription", Speaker.INTERVIEWER),
            ):
                transcription = getattr(content, attr, None)
                if transcription is not None and transcription.text:
                    self._emit(ConversationEvent(
                        ConversationEventType.TRANSCRIPT,
                        text=transcription.text,
                        speaker=speaker,
                    ))

        tool_call = getattr(message, "tool_call", None)
        if tool_call is not None:
            for call in tool_call.function_calls or []:
                if call.name != self._end_call_function:
                    logger.warning("Interviewer called unknown function %s", call.name)
                    continue
                try:
                    await self._session.send_tool_response(
                        function_responses=[
                            types.FunctionResponse(id=call.id, name=call.name, response={"result": "ok"})
                        ]
                    )
                except Exception as exc:
                    logger.debug("Could not acknowledge %s: %s", call.name, exc)
                self._emit(ConversationEvent(ConversationEventType.CALL_ENDED))

        if getattr(message, "go_away", None) is not None:
            logger.info("Interviewer connection will close soon")

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        current = asyncio.current_task()
        for task in self._tasks:
            if task is not current:
                task.cancel()
        await self._close()

    async def _close(self) -> None:
        try:
            await self._stack.aclose()
        except Exception as exc:
            logger.debug("Error closing interviewer connection: %s", exc)
        self._session = None
