from typing import Dict, Any, Optional, List, Sequence
from dataclasses import dataclass
import httpx

from chatwire.domain.errors import ChatRequestError
from chatwire.domain.models.history_item import ResponseItem
from chatwire.domain.models.session_source import SessionSource
from chatwire.infrastructure.config.settings import get_settings
from chatwire.infrastructure.http.headers import (
    SUBAGENT_HEADER, build_conversation_headers, insert_header, subagent_header
)
from chatwire.infrastructure.observability.logging import request_logger
from .message_assembler import MessageAssembler
from .reasoning_resolver import resolve_reasoning_attachments
from .role_tracker import last_emitted_role


@dataclass
class ChatRequest:
    """Assembled request body plus headers for a streaming Chat Completions call"""
    body: Dict[str, Any]
    headers: httpx.Headers


def attach_reasoning_controls(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Add the fixed reasoning control fields to a request body"""

    payload["reasoning"] = {"enabled": True}
    payload["reasoning_split"] = True
    payload["thinking"] = {
        "type": "enabled",
        "clear_thinking": False,
    }
    payload["chat_template_kwargs"] = {
        "thinking": True,
    }
    return payload


class ChatRequestBuilder:
    """Builds Chat Completions requests from conversation history"""

    def __init__(
        self,
        model: str,
        instructions: str,
        input: Sequence[ResponseItem],
        tools: Sequence[Dict[str, Any]],
        enable_reasoning: Optional[bool] = None
    ):
        self.model = model
        self.instructions = instructions
        self.input = input
        self.tools = tools
        self.enable_reasoning = (
            get_settings().enable_reasoning if enable_reasoning is None else enable_reasoning
        )
        self._conversation_id: Optional[str] = None
        self._session_source: Optional[SessionSource] = None
        self.assembler = MessageAssembler()

    def conversation_id(self, conversation_id: Optional[str]) -> "ChatRequestBuilder":
        """Set the conversation id sent in the session headers"""
        self._conversation_id = conversation_id
        return self

    def session_source(self, source: Optional[SessionSource]) -> "ChatRequestBuilder":
        """Set the session source used to derive the subagent header"""
        self._session_source = source
        return self

    def build(self) -> ChatRequest:
        """Assemble the request body and headers.

        Raises:
            HeaderBuildError: If a header value cannot be sent on the wire
        """
        messages: List[Dict[str, Any]] = [{"role": "system", "content": self.instructions}]

        last_role = last_emitted_role(self.input)
        reasoning_by_anchor = resolve_reasoning_attachments(self.input, last_role)
        if reasoning_by_anchor:
            request_logger.log_reasoning_attached(
                sorted(reasoning_by_anchor),
                conversation_id=self._conversation_id
            )

        messages.extend(self.assembler.assemble(self.input, reasoning_by_anchor))

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": True,
            "tools": list(self.tools),
        }
        if self.enable_reasoning:
            payload = attach_reasoning_controls(payload)

        try:
            headers = build_conversation_headers(self._conversation_id)
            subagent = subagent_header(self._session_source)
            if subagent is not None:
                insert_header(headers, SUBAGENT_HEADER, subagent)
        except ChatRequestError as e:
            request_logger.log_build_failure(
                self.model,
                e.to_dict(),
                conversation_id=self._conversation_id
            )
            raise

        request_logger.log_request_built(
            model=self.model,
            message_count=len(messages),
            history_length=len(self.input),
            reasoning_controls=self.enable_reasoning,
            header_names=list(headers.keys()),
            conversation_id=self._conversation_id
        )

        return ChatRequest(body=payload, headers=headers)
