import structlog
import logging
import sys
from typing import Dict, Any, List, Optional

from chatwire.infrastructure.config.settings import Settings, get_settings


_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    structlog.processors.format_exc_info,
]


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog from CHATWIRE_* settings.

    Every entry carries the service name; ``conversation_id`` is taken from
    the call site or the bound context and omitted when neither has one.
    """

    settings = settings or get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO)
    )

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, drop_unset_conversation_id, _renderer(settings.log_format)],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=settings.service_name)


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def drop_unset_conversation_id(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Fall back to the bound conversation id, dropping the key when there is none"""

    if event_dict.get("conversation_id") is None:
        bound = structlog.contextvars.get_contextvars().get("conversation_id")
        if bound:
            event_dict["conversation_id"] = bound
        else:
            event_dict.pop("conversation_id", None)

    return event_dict


class RequestLogger:
    """Logger for request assembly events"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_request_built(
        self,
        model: str,
        message_count: int,
        history_length: int,
        reasoning_controls: bool,
        header_names: List[str],
        conversation_id: Optional[str] = None
    ):
        self.logger.info(
            "Chat request built",
            model=model,
            message_count=message_count,
            history_length=history_length,
            reasoning_controls=reasoning_controls,
            header_names=header_names,
            conversation_id=conversation_id
        )

    def log_reasoning_attached(self, anchors: List[int], conversation_id: Optional[str] = None):
        """Record which history positions received reasoning"""

        self.logger.debug("Reasoning attached", anchors=anchors, conversation_id=conversation_id)

    def log_build_failure(
        self,
        model: str,
        error: Dict[str, Any],
        conversation_id: Optional[str] = None
    ):
        self.logger.error(
            "Chat request build failed",
            model=model,
            error=error,
            conversation_id=conversation_id
        )


request_logger = RequestLogger("chatwire.request")
