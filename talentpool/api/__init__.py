"""
API layer for TalentPool

Contains FastAPI routers for:
- Talent profile and lifecycle commands
- Live interview sessions and the vendor webhook
- Interview reports
- Recruiter marketplace listing
"""

from talentpool.api.router import api_router

__all__ = ["api_router"]
