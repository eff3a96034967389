import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace

import pytest

from proctorview.ai.conversation import GeminiLiveConversation, rms_level
from proctorview.ai.script import build_script
from proctorview.core.errors import ConversationStartError
from proctorview.utils.enums import ConversationEventType, Speaker


class FakeLiveSession:
    def __init__(self, turns):
        self.turns = list(turns)
        self.client_content = []
        self.realtime = []
        self.tool_responses = []

    async def send_client_content(self, turns, turn_complete):
        self.client_content.append(turns)

    async def send_realtime_input(self, audio):
        self.realtime.append(audio)

    async def send_tool_response(self, function_responses):
        self.tool_responses.extend(function_responses)

    async def receive(self):
        if self.turns:
            for message in self.turns.pop(0):
                yield message


class FakeLive:
    def __init__(self, session, error=None):
        self.session = session
        self.error = error
        self.config = None
        self.closed = False

    @asynccontextmanager
    async def connect(self, model, config):
        if self.error is not None:
            raise self.error
        self.config = config
        try:
            yield self.session
        finally:
            self.closed = True


def _client(live):
    return SimpleNamespace(aio=SimpleNamespace(live=live))


def _transcript(attr, text):
    return SimpleNamespace(server_content=SimpleNamespace(**{attr: SimpleNamespace(text=text)}))


async def _no_audio():
    return
    yield


class Recorder:
    def __init__(self):
        self.events = []
        self.ended = asyncio.Event()

    def __call__(self, event):
        self.events.append(event)
        if event.type == ConversationEventType.CALL_ENDED:
            self.ended.set()

    def of(self, kind):
        return [e for e in self.events if e.type == kind]


@pytest.fixture
def script(interview):
    return build_script(interview, "Cam")


async def test_call_runs_until_end_call(settings, script):
    session = FakeLiveSession([[
        _transcript("output_transcription", "Hello Cam."),
        _transcript("input_transcription", "Hi!"),
        SimpleNamespace(tool_call=SimpleNamespace(
            function_calls=[SimpleNamespace(id="c1", name="end_call", args={})]
        )),
    ]])
    live = FakeLive(session)
    conversation = GeminiLiveConversation(_client(live), settings)
    recorder = Recorder()

    await conversation.start(script, _no_audio(), recorder)
    await asyncio.wait_for(recorder.ended.wait(), timeout=1)

    assert recorder.events[0].type == ConversationEventType.CALL_STARTED
    assert [(e.speaker, e.text) for e in recorder.of(ConversationEventType.TRANSCRIPT)] == [
        (Speaker.INTERVIEWER, "Hello Cam."),
        (Speaker.CANDIDATE, "Hi!"),
    ]
    assert session.tool_responses[0].name == "end_call"
    assert script.first_message in session.client_content[0].parts[0].text
    assert live.config.system_instruction.parts[0].text == script.instructions

    await conversation.stop()
    await conversation.stop()
    assert live.closed


async def test_remote_hangup_ends_the_call(settings, script):
    conversation = GeminiLiveConversation(_client(FakeLive(FakeLiveSession([]))), settings)
    recorder = Recorder()
    await conversation.start(script, _no_audio(), recorder)
    await asyncio.wait_for(recorder.ended.wait(), timeout=1)
    await conversation.stop()


async def test_agent_audio_comes_with_volume(settings, script):
    chunk = (8000).to_bytes(2, "little", signed=True) * 160
    session = FakeLiveSession([[SimpleNamespace(data=chunk)]])
    conversation = GeminiLiveConversation(_client(FakeLive(session)), settings)
    recorder = Recorder()

    await conversation.start(script, _no_audio(), recorder)
    await asyncio.wait_for(recorder.ended.wait(), timeout=1)

    assert recorder.of(ConversationEventType.AUDIO)[0].audio == chunk
    assert recorder.of(ConversationEventType.VOLUME)[0].level == pytest.approx(8000 / 32768)
    await conversation.stop()


async def test_microphone_audio_is_streamed(settings, script):
    session = FakeLiveSession([])
    conversation = GeminiLiveConversation(_client(FakeLive(session)), settings)

    async def microphone():
        yield b"\x00\x01"
        yield b"\x02\x03"

    await conversation.start(script, microphone(), Recorder())
    await asyncio.sleep(0.05)

    assert [blob.data for blob in session.realtime] == [b"\x00\x01", b"\x02\x03"]
    assert session.realtime[0].mime_type == "audio/pcm;rate=16000"
    await conversation.stop()


async def test_connect_failure(settings, script):
    live = FakeLive(FakeLiveSession([]), error=RuntimeError("invalid api key"))
    conversation = GeminiLiveConversation(_client(live), settings)
    with pytest.raises(ConversationStartError):
        await conversation.start(script, _no_audio(), Recorder())


async def test_receive_failure_is_reported_as_error(settings, script):
    class BrokenSession(FakeLiveSession):
        async def receive(self):
            raise ConnectionError("connection closed by peer")
            yield

    conversation = GeminiLiveConversation(_client(FakeLive(BrokenSession([]))), settings)
    recorder = Recorder()
    await conversation.start(script, _no_audio(), recorder)
    await asyncio.sleep(0.05)

    errors = recorder.of(ConversationEventType.ERROR)
    assert errors and "connection closed" in errors[0].error
    await conversation.stop()


def test_rms_level():
    assert rms_level(b"") == 0.0
    assert rms_level(b"\x00\x00" * 10) == 0.0
    assert rms_level((-32768).to_bytes(2, "little", signed=True) * 4) == 1.0
