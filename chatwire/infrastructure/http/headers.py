"""
Outbound header helpers for chat completion requests
"""

from typing import Optional
import re
import httpx
import structlog

from chatwire.domain.errors import HeaderBuildError
from chatwire.domain.models.session_source import SessionKind, SessionSource, SubAgentKind

logger = structlog.get_logger(__name__)

SUBAGENT_HEADER = "x-openai-subagent"

_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_VALUE_RE = re.compile(r"[\t\x20-\x7e]*")


def insert_header(headers: httpx.Headers, name: str, value: str) -> None:
    """Set a header, rejecting names or values that cannot go on the wire"""

    if not _TOKEN_RE.fullmatch(name):
        raise HeaderBuildError(name, value, "name is not a valid HTTP token")
    if not _VALUE_RE.fullmatch(value):
        raise HeaderBuildError(name, value, "value contains control or non-ASCII characters")

    headers[name] = value


def build_conversation_headers(conversation_id: Optional[str]) -> httpx.Headers:
    """Base headers identifying the conversation and session"""

    headers = httpx.Headers()
    if conversation_id is not None:
        insert_header(headers, "conversation_id", conversation_id)
        insert_header(headers, "session_id", conversation_id)
    return headers


def subagent_header(source: Optional[SessionSource]) -> Optional[str]:
    """Canonical subagent name for the x-openai-subagent header"""

    if source is None or source.kind != SessionKind.SUBAGENT or source.subagent is None:
        return None

    subagent = source.subagent
    if subagent.kind == SubAgentKind.REVIEW:
        return "review"
    if subagent.kind == SubAgentKind.COMPACT:
        return "compact"
    if subagent.kind == SubAgentKind.THREAD_SPAWN:
        return "collab_spawn"
    if subagent.label:
        return subagent.label

    logger.warning("Subagent session source without label", subagent_kind=subagent.kind.value)
    return None
