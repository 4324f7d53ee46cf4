from typing import Optional

from pydantic import BaseModel, Field


class SnapshotStatus(BaseModel):
    refreshed_at: Optional[str] = Field(None, description="Last successful refresh (ISO 8601)")
    current_timestamp: int = Field(..., description="Provider timestamp of current conditions")
    hourly_entries: int = Field(..., description="Number of cached hourly entries")
    daily_entries: int = Field(..., description="Number of cached daily entries")


class RefreshStatus(BaseModel):
    running: bool = Field(..., description="Whether the refresh loop is active")
    total_ticks: int = Field(..., description="Ticks executed since startup")
    failed_ticks: int = Field(..., description="Ticks whose upstream call failed")
    last_kind: Optional[str] = Field(None, description="Kind of the last tick (current/full)")
    last_error: Optional[str] = Field(None, description="Error of the last failed tick")


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service health status")
    version: str = Field(..., description="API version")
    timestamp: str = Field(..., description="Current timestamp")
    snapshot: SnapshotStatus = Field(..., description="Cached snapshot summary")
    refresh: RefreshStatus = Field(..., description="Refresh loop status")
