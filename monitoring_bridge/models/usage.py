from __future__ import annotations

from pydantic import Field

from monitoring_bridge.models.wire import ProviderModel


class UsageSnapshot(ProviderModel):
    """Process-wide resource and activity counters from GetSystemUsage."""

    cpu_usage: float = Field(0.0, alias="CpuUsage")
    memory_usage_mb: float = Field(0.0, alias="MemoryUsageMB")
    uptime_seconds: float = Field(0.0, alias="UptimeSeconds")
    num_active_users: int = Field(0, alias="NumActiveUsers")
    num_chat_users: int = Field(0, alias="NumChatUsers")
    num_chat_rooms: int = Field(0, alias="NumChatRooms")
    num_running_lessons: int = Field(0, alias="NumRunningLessons")
