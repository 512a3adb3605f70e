"""
API endpoint modules for TalentPool
"""

from talentpool.api.endpoints import talent, interview, report, marketplace

__all__ = ["talent", "interview", "report", "marketplace"]
