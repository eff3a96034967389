from proctorview.utils.enums import Speaker

LABELS = {
    Speaker.INTERVIEWER: "Interviewer",
    Speaker.CANDIDATE: "Candidate",
}


class Transcript:
    """Spoken turns in order. Consecutive fragments from one speaker form one turn."""

    def __init__(self):
        self.turns = []

    def add(self, speaker: Speaker, text: str) -> None:
        if not text:
            return
        if self.turns and self.turns[-1][0] == speaker:
            self.turns[-1][1] += text
        else:
            self.turns.append([speaker, text])

    def render(self) -> str:
        return "\n".join(
            f"{LABELS[speaker]}: {text.strip()}"
            for speaker, text in self.turns
            if text.strip()
        )
