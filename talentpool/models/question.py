"""
Question and AI input models for TalentPool
"""

from pydantic import BaseModel, Field


class InterviewQuestions(BaseModel):
    """Question bundle generated for one interview cycle."""

    behavioural_questions: list[str] = Field(default_factory=list)
    situational_questions: list[str] = Field(default_factory=list)
    technical_questions: list[str] = Field(default_factory=list)

    def is_complete(self) -> bool:
        """All three lists must be non-empty."""
        return bool(
            self.behavioural_questions
            and self.situational_questions
            and self.technical_questions
        )

    def is_empty(self) -> bool:
        return not (
            self.behavioural_questions
            or self.situational_questions
            or self.technical_questions
        )

    def sections(self) -> list[tuple[str, list[str]]]:
        """Labelled question lists in interview order."""
        return [
            ("Behavioural", self.behavioural_questions),
            ("Situational", self.situational_questions),
            ("Technical", self.technical_questions),
        ]

    def to_numbered_text(self, suffix: str = "") -> str:
        """Render the bundle as numbered lists, one block per non-empty section."""
        blocks = []
        for label, questions in self.sections():
            if not questions:
                continue
            numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, 1))
            blocks.append(f"{label}{suffix}:\n{numbered}")
        return "\n\n".join(blocks)


class QuestionGenerationInput(BaseModel):
    """Candidate context sent to the question generator."""

    headline: str
    summary: str
    skills: list[str] = Field(default_factory=list)
    experience_summary: str = ""
    role: str


class CVAnalysis(BaseModel):
    """Structured result of CV parsing."""

    skills: list[str] = Field(default_factory=list)
    experience: list[dict[str, str]] = Field(default_factory=list)
    education: list[dict[str, str]] = Field(default_factory=list)
    summary: str = ""
