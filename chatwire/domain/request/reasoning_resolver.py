from typing import Dict, Any, Optional, Sequence
from pydantic import BaseModel, ConfigDict
import structlog

from chatwire.domain.models.history_item import (
    Message, FunctionCall, LocalShellCall, Reasoning, ReasoningSource, ResponseItem
)

logger = structlog.get_logger(__name__)

_SOURCE_RANK = {
    ReasoningSource.REASONING: 0,
    ReasoningSource.REASONING_CONTENT: 1,
    ReasoningSource.REASONING_DETAILS: 2,
}


class ReasoningAttachment(BaseModel):
    """Reasoning folded into the wire message of its anchor item"""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    details: Optional[Any] = None
    source: Optional[ReasoningSource] = None


def reasoning_source_rank(source: ReasoningSource) -> int:
    """Priority of a reasoning source; higher wins on merge"""
    return _SOURCE_RANK[source]


def merge_reasoning_source(
    existing: Optional[ReasoningSource],
    incoming: Optional[ReasoningSource]
) -> Optional[ReasoningSource]:
    """Pick the source tag to keep when two attachments merge"""

    if incoming is None:
        return existing
    if existing is None or reasoning_source_rank(incoming) > reasoning_source_rank(existing):
        return incoming
    return existing


def merge_reasoning_attachment(
    existing: ReasoningAttachment,
    incoming: ReasoningAttachment
) -> ReasoningAttachment:
    """Merge ``incoming`` after ``existing`` on the same anchor.

    Text is concatenated in scan order, the details blob is last-write-wins and
    the source tag only changes when the incoming one ranks strictly higher.
    """
    return ReasoningAttachment(
        text=existing.text + incoming.text if incoming.text else existing.text,
        details=incoming.details if incoming.details is not None else existing.details,
        source=merge_reasoning_source(existing.source, incoming.source),
    )


def _reasoning_text(item: Reasoning) -> str:
    return "".join(entry.text for entry in item.content or [])


def _is_assistant_message(item: ResponseItem) -> bool:
    return isinstance(item, Message) and item.role == "assistant"


def _find_anchor(items: Sequence[ResponseItem], idx: int) -> Optional[int]:
    # The preceding assistant message always wins over a following action.
    if idx > 0 and _is_assistant_message(items[idx - 1]):
        return idx - 1
    if idx + 1 < len(items):
        following = items[idx + 1]
        if isinstance(following, (FunctionCall, LocalShellCall)) or _is_assistant_message(following):
            return idx + 1
    return None


def resolve_reasoning_attachments(
    items: Sequence[ResponseItem],
    last_role: Optional[str]
) -> Dict[int, ReasoningAttachment]:
    """Map history positions to the reasoning that belongs on them.

    Only reasoning after the last user message is considered, and nothing is
    attached when the conversation ends on a user turn.
    """
    attachments: Dict[int, ReasoningAttachment] = {}
    if last_role == "user":
        return attachments

    last_user_index: Optional[int] = None
    for idx, item in enumerate(items):
        if isinstance(item, Message) and item.role == "user":
            last_user_index = idx

    start = 0 if last_user_index is None else last_user_index + 1
    for idx in range(start, len(items)):
        item = items[idx]
        if not isinstance(item, Reasoning):
            continue

        text = _reasoning_text(item)
        details = item.reasoning_details
        if not text.strip() and details is None:
            continue

        source = item.reasoning_source
        if source is None and details is not None:
            source = ReasoningSource.REASONING_DETAILS

        anchor = _find_anchor(items, idx)
        if anchor is None:
            logger.debug("Dropping reasoning without anchor", position=idx)
            continue

        attachment = ReasoningAttachment(text=text, details=details, source=source)
        if anchor in attachments:
            attachments[anchor] = merge_reasoning_attachment(attachments[anchor], attachment)
        else:
            attachments[anchor] = attachment

    return attachments
