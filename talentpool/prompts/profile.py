"""
AI Profile Prompts

Prompts used while a talent builds their profile: CV parsing and
professional summary suggestions.
"""


class ProfilePrompts:
    """Prompt templates for profile assistance."""

    def analyze_cv_prompt(self, cv_text: str) -> str:
        """Generate prompt for structured CV extraction."""
        return f"""You are an expert resume parser. Extract the following information from the CV document.

Skills: A list of skills extracted from the CV.
Experience: A list of work experiences. Include the job title, company name, dates, and a description of the job.
Education: A list of education entries. Include the degree name, institution name, dates, and a description.
Summary: A short summary of the candidate's qualifications.

=== CV DOCUMENT ===
{cv_text}

Output JSON only:
{{
    "skills": ["..."],
    "experience": [{{"title": "", "company": "", "dates": "", "description": ""}}],
    "education": [{{"degree": "", "institution": "", "dates": "", "description": ""}}],
    "summary": "..."
}}"""

    def summary_suggestions_prompt(self, headline: str) -> str:
        """Generate prompt for professional summary suggestions."""
        return f"""You are an expert career advisor and resume writer.
Based on the following professional headline, generate 3 concise and impactful professional summary suggestions.
Each suggestion should be a short paragraph, typically 2-4 sentences long, highlighting key aspects implied by the headline.
Focus on action verbs and quantifiable achievements if possible, or highlight key skills and aspirations.

Professional Headline:
"{headline}"

Output JSON only:
{{
    "suggestions": ["Suggestion 1...", "Suggestion 2...", "Suggestion 3..."]
}}"""
