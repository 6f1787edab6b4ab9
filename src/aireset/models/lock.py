"""Lock model for preventing concurrent resets of one workspace.

The archive core does no locking of its own; the command layer takes
this PID-based lock around every operation that writes to the workspace.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Lock(BaseModel):
    """Active operation lock written to .ai/reset.lock.

    Attributes:
        pid: Process ID of the lock holder.
        command: Command that acquired the lock.
        started_at: When the lock was acquired.
    """

    pid: int = Field(description="Process ID holding the lock")
    command: str = Field(description="Command that acquired lock")
    started_at: datetime = Field(default_factory=datetime.now)
