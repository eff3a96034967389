class RoomEntryError(Exception):
    """The interview room cannot be opened; control goes back to the caller."""


class NoActiveSessionError(RoomEntryError):
    def __init__(self, candidate_id: str):
        super().__init__(f"No active interview session for candidate {candidate_id}")
        self.candidate_id = candidate_id


class InterviewDataMissingError(RoomEntryError):
    def __init__(self, interview_id: str):
        super().__init__(f"Interview {interview_id} could not be found")
        self.interview_id = interview_id


class MediaPermissionError(Exception):
    """Camera or microphone access was refused or never granted."""


class ConversationStartError(Exception):
    """The conversation agent could not be connected."""


class ScoringError(Exception):
    """The scoring collaborator failed or returned an unusable result."""


class EvaluationUnavailableError(ValueError):
    """The session has nothing that can be scored."""


class NotFoundError(ValueError):
    pass


class InvalidInterviewError(ValueError):
    pass


class AccessCodeError(ValueError):
    pass


class SessionConflictError(ValueError):
    pass


class IllegalTransitionError(ValueError):
    pass


class ProfileExistsError(ValueError):
    pass
