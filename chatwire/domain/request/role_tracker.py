from typing import Optional, Sequence

from chatwire.domain.models.history_item import (
    Message, FunctionCall, LocalShellCall, FunctionCallOutput,
    CustomToolCall, CustomToolCallOutput, Reasoning, WebSearchCall,
    GhostSnapshot, Compaction, Other, ResponseItem
)


def last_emitted_role(items: Sequence[ResponseItem]) -> Optional[str]:
    """Role of the last item that would go out as a message-like turn"""

    role: Optional[str] = None
    for item in items:
        if isinstance(item, Message):
            role = item.role
        elif isinstance(item, (FunctionCall, LocalShellCall)):
            role = "assistant"
        elif isinstance(item, FunctionCallOutput):
            role = "tool"
        elif isinstance(item, (
            Reasoning, CustomToolCall, CustomToolCallOutput,
            WebSearchCall, GhostSnapshot, Compaction, Other
        )):
            continue
        else:
            raise TypeError(f"Unhandled history item: {type(item).__name__}")
    return role
