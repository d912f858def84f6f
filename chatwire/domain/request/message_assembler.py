from typing import Dict, Any, Optional, List, Sequence
import structlog

from chatwire.domain.models.history_item import (
    Message, FunctionCall, LocalShellCall, FunctionCallOutput,
    CustomToolCall, CustomToolCallOutput, Reasoning, WebSearchCall,
    GhostSnapshot, Compaction, Other, InputText, OutputText, InputImage,
    ReasoningSource, ResponseItem
)
from .reasoning_resolver import ReasoningAttachment

logger = structlog.get_logger(__name__)


def attach_reasoning_fields(message: Dict[str, Any], reasoning: ReasoningAttachment) -> None:
    """Fold a reasoning attachment into a wire message in place"""

    if reasoning.details is not None:
        message["reasoning_details"] = reasoning.details
        return

    if not reasoning.text.strip():
        return

    if reasoning.source == ReasoningSource.REASONING_CONTENT:
        message["reasoning_content"] = reasoning.text
    else:
        message["reasoning"] = reasoning.text


def _text_part(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def _image_part(image_url: str) -> Dict[str, Any]:
    return {"type": "image_url", "image_url": {"url": image_url}}


class MessageAssembler:
    """Turns history items into Chat Completions wire messages"""

    def assemble(
        self,
        items: Sequence[ResponseItem],
        reasoning_by_anchor: Dict[int, ReasoningAttachment]
    ) -> List[Dict[str, Any]]:
        """Build the wire message list in history order"""

        messages: List[Dict[str, Any]] = []
        last_assistant_text: Optional[str] = None

        for idx, item in enumerate(items):
            reasoning = reasoning_by_anchor.get(idx)

            if isinstance(item, Message):
                text = self._message_text(item)
                if item.role == "assistant":
                    if last_assistant_text is not None and last_assistant_text == text:
                        logger.debug("Suppressing duplicate assistant message", position=idx)
                        continue
                    last_assistant_text = text
                messages.append(self._message(item, text, reasoning))
            elif isinstance(item, FunctionCall):
                messages.append(self._function_call(item, reasoning))
            elif isinstance(item, LocalShellCall):
                messages.append(self._local_shell_call(item, reasoning))
            elif isinstance(item, FunctionCallOutput):
                messages.append(self._function_call_output(item))
            elif isinstance(item, CustomToolCall):
                messages.append(self._custom_tool_call(item))
            elif isinstance(item, CustomToolCallOutput):
                messages.append({
                    "role": "tool",
                    "tool_call_id": item.call_id,
                    "content": item.output,
                })
            elif isinstance(item, (Reasoning, WebSearchCall, GhostSnapshot, Compaction, Other)):
                continue
            else:
                raise TypeError(f"Unhandled history item: {type(item).__name__}")

        return messages

    @staticmethod
    def _message_text(item: Message) -> str:
        return "".join(
            part.text for part in item.content
            if isinstance(part, (InputText, OutputText))
        )

    def _message(
        self,
        item: Message,
        text: str,
        reasoning: Optional[ReasoningAttachment]
    ) -> Dict[str, Any]:
        """Plain role/content message"""

        # Assistant turns cannot carry images on this API.
        if item.role == "assistant":
            content: Any = text
        elif any(isinstance(part, InputImage) for part in item.content):
            content = [
                _image_part(part.image_url) if isinstance(part, InputImage) else _text_part(part.text)
                for part in item.content
            ]
        else:
            content = text

        message = {"role": item.role, "content": content}
        if item.role == "assistant" and reasoning is not None:
            attach_reasoning_fields(message, reasoning)
        return message

    def _function_call(self, item: FunctionCall, reasoning: Optional[ReasoningAttachment]) -> Dict[str, Any]:
        message = {
            "role": "assistant",
            "content": None,
            "tool_calls": [{
                "id": item.call_id,
                "type": "function",
                "function": {
                    "name": item.name,
                    "arguments": item.arguments,
                }
            }]
        }
        if reasoning is not None:
            attach_reasoning_fields(message, reasoning)
        return message

    def _local_shell_call(self, item: LocalShellCall, reasoning: Optional[ReasoningAttachment]) -> Dict[str, Any]:
        message = {
            "role": "assistant",
            "content": None,
            "tool_calls": [{
                "id": item.id or "",
                "type": "local_shell_call",
                "status": item.status.value,
                "action": item.action.model_dump(mode="json"),
            }]
        }
        if reasoning is not None:
            attach_reasoning_fields(message, reasoning)
        return message

    def _function_call_output(self, item: FunctionCallOutput) -> Dict[str, Any]:
        if item.output.content_items is not None:
            content: Any = [
                _image_part(part.image_url) if isinstance(part, InputImage) else _text_part(part.text)
                for part in item.output.content_items
            ]
        else:
            content = item.output.content

        return {
            "role": "tool",
            "tool_call_id": item.call_id,
            "content": content,
        }

    def _custom_tool_call(self, item: CustomToolCall) -> Dict[str, Any]:
        return {
            "role": "assistant",
            "content": None,
            "tool_calls": [{
                "id": item.id,
                "type": "custom",
                "custom": {
                    "name": item.name,
                    "input": item.input,
                }
            }]
        }
