"""
AI Interviewer Prompt Templates

Contains prompts for:
- Generating the per-candidate interview question bundle
- Scripting the voice interviewer for a live call
"""

from talentpool.models.question import InterviewQuestions, QuestionGenerationInput


class InterviewerPrompts:
    """
    Prompt templates for interview preparation and the voice interviewer.

    Key principles:
    - Questions are tailored to the candidate's headline, summary and skills
    - One question at a time, conversational tone on the call
    - The call ends right after the closing sentence
    """

    QUESTION_SYSTEM_CONTEXT = """You are an expert technical recruiter preparing a voice screening interview.

Your role:
- Read the candidate's profile carefully
- Write questions that test the skills the candidate claims
- Keep each question short enough to be asked aloud
- Avoid yes/no questions
"""

    def generate_questions_prompt(self, candidate: QuestionGenerationInput) -> str:
        """Generate prompt for the three-part question bundle."""
        skills = ", ".join(candidate.skills) if candidate.skills else "Not specified"
        experience = candidate.experience_summary or "Not provided"

        return f"""{self.QUESTION_SYSTEM_CONTEXT}

=== CANDIDATE PROFILE ===
Role: {candidate.role}
Headline: {candidate.headline}
Professional Summary:
{candidate.summary}

Skills: {skills}

Experience:
{experience}

=== YOUR TASK ===
Write interview questions in three groups:
1. Behavioural: 2-3 questions about past behaviour and teamwork
2. Situational: 2-3 hypothetical workplace scenarios relevant to the role
3. Technical: 3-4 questions probing the listed skills at the candidate's level

Output JSON only:
{{
    "behaviouralQuestions": ["..."],
    "situationalQuestions": ["..."],
    "technicalQuestions": ["..."]
}}"""

    def first_message(self, candidate_name: str, job_position: str) -> str:
        return f"Hi {candidate_name}, how are you? Ready for your interview for the {job_position} role?"

    def voice_system_prompt(
        self,
        candidate_name: str,
        job_position: str,
        questions: InterviewQuestions | None,
    ) -> str:
        """Script for the voice assistant conducting the call."""
        if questions and not questions.is_empty():
            all_questions = questions.to_numbered_text(suffix=" Questions")
        else:
            all_questions = (
                "No specific questions pre-loaded. Please conduct a general interview "
                "based on the candidate's profile."
            )

        return f"""You are an AI voice assistant conducting interviews.
Your job is to ask candidates provided interview questions, assess their responses.
Begin the conversation with a friendly introduction, setting a relaxed yet professional tone. Example:
"Hey {candidate_name}! Welcome to your {job_position} interview. Let's get started with a few questions!"
Ask one question at a time and wait for the candidate's response before proceeding. Keep the questions clear and concise. Below are the questions, ask them one by one:
Questions for {candidate_name}:
{all_questions}
If the candidate struggles, offer hints or rephrase the question without giving away the answer.
Provide brief, encouraging feedback after each answer.
Keep the conversation natural and engaging.
After all questions from the list have been asked, or a reasonable selection (5-7) if the list is long, wrap up the interview smoothly.
End on a positive note:
"Thanks for chatting, {candidate_name}! Hope to see you crushing projects soon!"
Key Guidelines:
- Be friendly and engaging
- Keep responses short and natural, like a real conversation
- Adapt based on the candidate's confidence level
- Keep the interview focused on the {job_position} role and the skills the questions target
- Do not add any commentary after your final goodbye. End the call immediately after your final sentence.""".strip()
