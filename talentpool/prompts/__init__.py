"""
AI prompt templates for TalentPool

Contains structured prompts for:
- Interview question generation
- Voice interviewer scripting
- Transcript scoring
- CV parsing and summary suggestions
"""

from talentpool.prompts.interviewer import InterviewerPrompts
from talentpool.prompts.evaluator import EvaluatorPrompts
from talentpool.prompts.profile import ProfilePrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
    "ProfilePrompts",
]
