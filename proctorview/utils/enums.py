from enum import Enum


class UserRole(str, Enum):
    RECRUITER = "recruiter"
    INTERVIEWEE = "interviewee"
    ADMIN = "admin"


class InterviewStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    TERMINATED_EARLY = "terminated_early"


class SessionDecision(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class RoomPhase(str, Enum):
    LOADING = "loading"
    INSTRUCTIONS = "instructions"
    CONNECTING = "connecting"
    LIVE = "live"
    COMPLETED = "completed"
    TERMINATED = "terminated"


class EventType(str, Enum):
    TAB_SWITCH = "TAB_SWITCH"
    WINDOW_BLUR = "WINDOW_BLUR"
    FULLSCREEN_EXIT = "FULLSCREEN_EXIT"
    FACE_MISSING = "FACE_MISSING"
    MULTIPLE_FACES = "MULTIPLE_FACES"


class SeverityLevel(str, Enum):
    WARNING = "WARNING"
    VIOLATION = "VIOLATION"


class ConversationEventType(str, Enum):
    CALL_STARTED = "call_started"
    CALL_ENDED = "call_ended"
    ERROR = "error"
    TRANSCRIPT = "transcript"
    AUDIO = "audio"
    VOLUME = "volume"


class Speaker(str, Enum):
    INTERVIEWER = "interviewer"
    CANDIDATE = "candidate"
