from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class SessionKind(str, Enum):
    """Surface that started the session"""
    CLI = "cli"
    VSCODE = "vscode"
    EXEC = "exec"
    MCP = "mcp"
    SUBAGENT = "subagent"
    UNKNOWN = "unknown"


class SubAgentKind(str, Enum):
    """Subagent roles"""
    REVIEW = "review"
    COMPACT = "compact"
    THREAD_SPAWN = "thread_spawn"
    OTHER = "other"


class SubAgentSource(BaseModel):
    """Identity of the subagent that owns a session"""
    model_config = ConfigDict(frozen=True)

    kind: SubAgentKind
    label: Optional[str] = Field(None, description="Free-form name for OTHER subagents")
    parent_thread_id: Optional[str] = None
    depth: Optional[int] = None


class SessionSource(BaseModel):
    """Where the current session originated"""
    model_config = ConfigDict(frozen=True)

    kind: SessionKind = SessionKind.UNKNOWN
    subagent: Optional[SubAgentSource] = None

    @classmethod
    def for_subagent(
        cls,
        kind: SubAgentKind,
        label: Optional[str] = None,
        parent_thread_id: Optional[str] = None,
        depth: Optional[int] = None
    ) -> "SessionSource":
        """Create a subagent session source"""
        return cls(
            kind=SessionKind.SUBAGENT,
            subagent=SubAgentSource(
                kind=kind,
                label=label,
                parent_thread_id=parent_thread_id,
                depth=depth
            )
        )
