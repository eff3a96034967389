from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "ProctorView Interview Platform"
    API_V1_PREFIX: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./proctorview.db"
    CORS_ORIGINS: list[str] = [
        "http://localhost:4444",
        "http://127.0.0.1:4444",
    ]
    LOG_LEVEL: str = "INFO"

    # Gemini
    GEMINI_API_KEY: str = ""
    SCORING_MODEL: str = "gemini-2.5-flash"
    LIVE_MODEL: str = "gemini-2.5-flash-native-audio-preview-09-2025"
    VOICE_NAME: str = "Zephyr"
    INPUT_SAMPLE_RATE: int = 16000

    # Face presence
    FACE_SAMPLE_INTERVAL_MS: int = 100
    NO_FACE_WARNING_MS: int = 2000
    NO_FACE_TERMINATE_MS: int = 10000
    MULTI_FACE_TERMINATE_MS: int = 5000
    FACE_MIN_CONFIDENCE: float = 0.6

    # Timeouts
    MEDIA_PERMISSION_TIMEOUT_SECONDS: float = 30.0
    HANDSHAKE_TIMEOUT_SECONDS: float = 20.0
    SCORING_TIMEOUT_SECONDS: float = 60.0

    # Authoring
    ACCESS_CODE_LENGTH: int = 6
    WEIGHT_TOLERANCE: int = 1

    # Agent errors that just mean the far end hung up
    CALL_END_ERROR_MARKERS: list[str] = [
        "session closed",
        "connection closed",
        "connectionclosed",
        "room was deleted",
        "meeting has ended",
        "meeting ended",
        "ejected",
    ]

    class Config:
        env_file = ".env"


settings = Settings()
