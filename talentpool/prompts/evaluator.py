"""
AI Evaluator Prompt Templates

Contains the structured prompt for scoring a full interview transcript
into four independent category scores plus qualitative feedback.

Categories (fixed order):
- Communication & English Proficiency
- Technical Knowledge & Role Fit
- Problem Solving & Thinking
- Culture & Work Ethic Alignment
"""

from talentpool.models.question import InterviewQuestions
from talentpool.models.report import CANONICAL_CATEGORIES


class EvaluatorPrompts:
    """
    Prompt templates for AI evaluation of interview transcripts.

    Key principles:
    - Independent, unweighted category scores (weighting is applied later)
    - Grade against the intended questions, not the transcript alone
    - Constructive but not lenient
    """

    SYSTEM_CONTEXT = """You are an expert AI Interview Assessor generating a report for recruiters.
Based on the following interview conversation between an AI assistant and a candidate, provide a structured feedback report.
"""

    SCORING_RUBRIC = """
=== SCORING RUBRIC (0-100 per category, independent) ===

COMMUNICATION & ENGLISH PROFICIENCY:
Clarity, fluency, comprehension and articulation during the voice interview.
Minimum expected score for talent: 75.

TECHNICAL KNOWLEDGE & ROLE FIT:
Relevance and depth of technical knowledge for the role, and alignment with the skills the questions target.
Minimum expected score for talent: 75.

PROBLEM SOLVING & THINKING:
Analytical thinking, logical reasoning and structured approach to the scenarios presented.
Minimum expected score for talent: 65.

CULTURE & WORK ETHIC ALIGNMENT:
Attitude, ownership mentality and startup mindset shown in responses and engagement.
Minimum expected score for talent: 60.
"""

    def question_context(self, questions: InterviewQuestions | None) -> str:
        """Describe what the interview was meant to cover."""
        header = "The interview was intended to cover the following areas and questions:\n"
        if questions is None or questions.is_empty():
            return header + "General interview questions based on profile were asked.\n"
        return header + questions.to_numbered_text() + "\n"

    def transcript_with_context(
        self,
        questions: InterviewQuestions | None,
        transcript: str,
    ) -> str:
        return f"{self.question_context(questions)}\nInterview Transcript:\n{transcript}"

    def generate_summary_prompt(
        self,
        candidate_name: str,
        job_title: str,
        interviewer_label: str,
        interview_date: str,
        transcript_with_context: str,
    ) -> str:
        """Generate prompt for the transcript scoring report."""
        categories = "\n".join(f"{i}. {name}" for i, name in enumerate(CANONICAL_CATEGORIES, 1))

        return f"""{self.SYSTEM_CONTEXT}
Candidate Name: {candidate_name}
Job Title: {job_title}
Interviewer Name: {interviewer_label}
Interview Date: {interview_date}

Interview Conversation (including initial question context and full transcript):
{transcript_with_context}

{self.SCORING_RUBRIC}

=== YOUR TASK ===
1. Analyze the entire conversation thoroughly.
2. Score each of these four categories from 0 to 100 with a 2-3 sentence comment, in this exact order:
{categories}
3. List 2-4 key strengths.
4. List 2-4 areas for improvement, with constructive suggestions where possible.
5. Write a 3-5 sentence final assessment of the candidate's suitability for the role of '{job_title}'.
6. Be objective and detailed. Do not be overly lenient.
Do NOT calculate a total score; the application will handle weighting.

Output JSON only:
{{
    "categoryScores": [
        {{"name": "{CANONICAL_CATEGORIES[0]}", "score": 85, "comment": "..."}},
        ...
    ],
    "strengths": ["..."],
    "areasForImprovement": ["..."],
    "finalAssessment": "..."
}}"""
