"""
TalentPool - AI-Vetted Talent Marketplace Backend

Owns the talent interview lifecycle: profile submission, AI question
generation, voice interviews, background scoring and tiering, and the
recruiter-facing talent listing.
"""

__version__ = "0.1.0"
__author__ = "TalentPool Team"
