from typing import Dict, Any, Optional, List, Literal, Union, Annotated
from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, field_validator
from enum import Enum


class ItemType(str, Enum):
    """Conversation history item kinds"""
    MESSAGE = "message"
    FUNCTION_CALL = "function_call"
    LOCAL_SHELL_CALL = "local_shell_call"
    FUNCTION_CALL_OUTPUT = "function_call_output"
    CUSTOM_TOOL_CALL = "custom_tool_call"
    CUSTOM_TOOL_CALL_OUTPUT = "custom_tool_call_output"
    REASONING = "reasoning"
    WEB_SEARCH_CALL = "web_search_call"
    GHOST_SNAPSHOT = "ghost_snapshot"
    COMPACTION = "compaction"
    OTHER = "other"


class ReasoningSource(str, Enum):
    """Where a reasoning fragment was streamed from"""
    REASONING = "reasoning"
    REASONING_CONTENT = "reasoning_content"
    REASONING_DETAILS = "reasoning_details"


class LocalShellStatus(str, Enum):
    """Local shell call execution status"""
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    INCOMPLETE = "incomplete"


class FrozenModel(BaseModel):
    """Base for immutable history values"""
    model_config = ConfigDict(frozen=True)


# Content parts

class InputText(FrozenModel):
    type: Literal["input_text"] = "input_text"
    text: str


class OutputText(FrozenModel):
    type: Literal["output_text"] = "output_text"
    text: str


class InputImage(FrozenModel):
    type: Literal["input_image"] = "input_image"
    image_url: str


ContentItem = Annotated[Union[InputText, OutputText, InputImage], Field(discriminator="type")]

FunctionCallOutputContentItem = Annotated[Union[InputText, InputImage], Field(discriminator="type")]


class FunctionCallOutputPayload(FrozenModel):
    """Tool output: raw text, optionally with structured content items"""
    content: str = ""
    content_items: Optional[List[FunctionCallOutputContentItem]] = None
    success: Optional[bool] = None


class ReasoningText(FrozenModel):
    type: Literal["reasoning_text"] = "reasoning_text"
    text: str


class ReasoningPlainText(FrozenModel):
    type: Literal["text"] = "text"
    text: str


ReasoningItemContent = Annotated[Union[ReasoningText, ReasoningPlainText], Field(discriminator="type")]


class ReasoningSummary(FrozenModel):
    type: Literal["summary_text"] = "summary_text"
    text: str


class LocalShellAction(FrozenModel):
    """Command executed by a local shell call"""
    type: Literal["exec"] = "exec"
    command: List[str]
    timeout_ms: Optional[int] = None
    working_directory: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    user: Optional[str] = None


# History items

class Message(FrozenModel):
    """A user, assistant, system or developer turn"""
    type: Literal["message"] = "message"
    id: Optional[str] = None
    role: str
    content: List[ContentItem] = Field(default_factory=list)


class FunctionCall(FrozenModel):
    """Model-issued function tool invocation"""
    type: Literal["function_call"] = "function_call"
    id: Optional[str] = None
    name: str
    arguments: str = Field(description="Raw JSON arguments, never parsed here")
    call_id: str


class LocalShellCall(FrozenModel):
    """Model-issued local shell command"""
    type: Literal["local_shell_call"] = "local_shell_call"
    id: Optional[str] = None
    call_id: Optional[str] = None
    status: LocalShellStatus
    action: LocalShellAction


class FunctionCallOutput(FrozenModel):
    """Result of a function or local shell call"""
    type: Literal["function_call_output"] = "function_call_output"
    call_id: str
    output: FunctionCallOutputPayload

    @field_validator("output", mode="before")
    @classmethod
    def _coerce_output(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"content": value}
        if isinstance(value, list):
            return {"content": "", "content_items": value}
        return value


class CustomToolCall(FrozenModel):
    """Freeform (non-JSON) tool invocation"""
    type: Literal["custom_tool_call"] = "custom_tool_call"
    id: Optional[str] = None
    status: Optional[str] = None
    call_id: str
    name: str
    input: str


class CustomToolCallOutput(FrozenModel):
    type: Literal["custom_tool_call_output"] = "custom_tool_call_output"
    call_id: str
    output: str


class Reasoning(FrozenModel):
    """Reasoning trace emitted alongside an assistant turn"""
    type: Literal["reasoning"] = "reasoning"
    id: Optional[str] = None
    summary: List[ReasoningSummary] = Field(default_factory=list)
    content: Optional[List[ReasoningItemContent]] = None
    encrypted_content: Optional[str] = None
    reasoning_details: Optional[Any] = Field(None, description="Opaque provider reasoning blob")
    reasoning_source: Optional[ReasoningSource] = None


class WebSearchCall(FrozenModel):
    type: Literal["web_search_call"] = "web_search_call"
    id: Optional[str] = None
    status: Optional[str] = None
    action: Optional[Dict[str, Any]] = None


class GhostSnapshot(FrozenModel):
    """Undo snapshot marker"""
    type: Literal["ghost_snapshot"] = "ghost_snapshot"
    ghost_commit: Dict[str, Any] = Field(default_factory=dict)


class Compaction(FrozenModel):
    """Marker left where history was compacted"""
    type: Literal["compaction"] = "compaction"
    encrypted_content: str


class Other(FrozenModel):
    """Any item kind this package does not know about"""
    model_config = ConfigDict(frozen=True, extra="allow")

    type: str = ItemType.OTHER.value


_KNOWN_TAGS = {item_type.value for item_type in ItemType if item_type is not ItemType.OTHER}


def _item_tag(value: Any) -> str:
    if isinstance(value, dict):
        tag = value.get("type")
    else:
        tag = getattr(value, "type", None)
    if isinstance(tag, ItemType):
        tag = tag.value
    if isinstance(value, Other) or tag not in _KNOWN_TAGS:
        return ItemType.OTHER.value
    return tag


ResponseItem = Annotated[
    Union[
        Annotated[Message, Tag(ItemType.MESSAGE.value)],
        Annotated[FunctionCall, Tag(ItemType.FUNCTION_CALL.value)],
        Annotated[LocalShellCall, Tag(ItemType.LOCAL_SHELL_CALL.value)],
        Annotated[FunctionCallOutput, Tag(ItemType.FUNCTION_CALL_OUTPUT.value)],
        Annotated[CustomToolCall, Tag(ItemType.CUSTOM_TOOL_CALL.value)],
        Annotated[CustomToolCallOutput, Tag(ItemType.CUSTOM_TOOL_CALL_OUTPUT.value)],
        Annotated[Reasoning, Tag(ItemType.REASONING.value)],
        Annotated[WebSearchCall, Tag(ItemType.WEB_SEARCH_CALL.value)],
        Annotated[GhostSnapshot, Tag(ItemType.GHOST_SNAPSHOT.value)],
        Annotated[Compaction, Tag(ItemType.COMPACTION.value)],
        Annotated[Other, Tag(ItemType.OTHER.value)],
    ],
    Discriminator(_item_tag),
]

_HISTORY_ADAPTER = TypeAdapter(List[ResponseItem])


def parse_history(raw: List[Dict[str, Any]]) -> List[ResponseItem]:
    """Validate JSON-shaped history entries into typed items.

    Entries with an unrecognised ``type`` become ``Other`` and are later
    ignored by the request pipeline.
    """
    return _HISTORY_ADAPTER.validate_python(raw)
