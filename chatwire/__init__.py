from chatwire.domain.request.chat_request import ChatRequest, ChatRequestBuilder
from chatwire.domain.models.history_item import ResponseItem, parse_history
from chatwire.domain.models.session_source import SessionSource, SubAgentKind
from chatwire.domain.errors import ChatRequestError, HeaderBuildError

__all__ = [
    "ChatRequest",
    "ChatRequestBuilder",
    "ResponseItem",
    "parse_history",
    "SessionSource",
    "SubAgentKind",
    "ChatRequestError",
    "HeaderBuildError",
]
