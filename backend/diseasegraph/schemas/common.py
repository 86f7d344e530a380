"""
Shared response schemas.
"""

from datetime import datetime
from pydantic import BaseModel, Field


# Health Check Schema
class HealthCheck(BaseModel):
    """Health check response schema."""

    status: str = "healthy"
    version: str
    graph_state: str
    timestamp: datetime = Field(default_factory=datetime.now)
