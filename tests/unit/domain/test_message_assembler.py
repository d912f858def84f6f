import pytest

from chatwire.domain.models.history_item import (
    Compaction,
    CustomToolCall,
    CustomToolCallOutput,
    FunctionCall,
    FunctionCallOutput,
    FunctionCallOutputPayload,
    GhostSnapshot,
    InputImage,
    InputText,
    LocalShellAction,
    LocalShellCall,
    LocalShellStatus,
    Message,
    Other,
    OutputText,
    Reasoning,
    ReasoningSource,
    WebSearchCall,
    parse_history,
)
from chatwire.domain.request.message_assembler import MessageAssembler, attach_reasoning_fields
from chatwire.domain.request.reasoning_resolver import ReasoningAttachment


def assistant(text):
    return Message(role="assistant", content=[OutputText(text=text)])


def assemble(history, attachments=None):
    return MessageAssembler().assemble(history, attachments or {})


def test_user_text_parts_are_concatenated():
    history = [Message(role="user", content=[InputText(text="hel"), InputText(text="lo")])]

    assert assemble(history) == [{"role": "user", "content": "hello"}]


def test_user_message_with_image_keeps_structured_parts():
    history = [
        Message(
            role="user",
            content=[InputText(text="what is this?"), InputImage(image_url="https://img/cat.png")],
        )
    ]

    assert assemble(history) == [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "what is this?"},
                {"type": "image_url", "image_url": {"url": "https://img/cat.png"}},
            ],
        }
    ]


def test_assistant_images_are_flattened_to_text():
    history = [
        Message(role="assistant", content=[OutputText(text="see "), InputImage(image_url="u"), OutputText(text="it")])
    ]

    assert assemble(history) == [{"role": "assistant", "content": "see it"}]


def test_identical_assistant_messages_collapse():
    history = [assistant("same"), assistant("same"), assistant("different")]

    assert assemble(history) == [
        {"role": "assistant", "content": "same"},
        {"role": "assistant", "content": "different"},
    ]


def test_duplicate_detection_spans_other_items():
    history = [
        assistant("same"),
        Message(role="user", content=[InputText(text="ok")]),
        assistant("same"),
    ]

    assert [m["role"] for m in assemble(history)] == ["assistant", "user"]


def test_suppressed_duplicate_does_not_reset_tracked_text():
    history = [assistant("a"), assistant("a"), assistant("b"), assistant("a")]

    assert [m["content"] for m in assemble(history)] == ["a", "b", "a"]


def test_function_call_becomes_tool_call_envelope():
    history = [FunctionCall(name="shell", arguments='{"cmd": "ls"}', call_id="call-7")]

    assert assemble(history) == [
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": "call-7",
                    "type": "function",
                    "function": {"name": "shell", "arguments": '{"cmd": "ls"}'},
                }
            ],
        }
    ]


def test_local_shell_call_without_id_uses_empty_string():
    history = [
        LocalShellCall(
            call_id="c1",
            status=LocalShellStatus.COMPLETED,
            action=LocalShellAction(command=["ls"], working_directory="/tmp"),
        )
    ]

    message = assemble(history)[0]

    assert message["content"] is None
    assert message["tool_calls"] == [
        {
            "id": "",
            "type": "local_shell_call",
            "status": "completed",
            "action": {
                "type": "exec",
                "command": ["ls"],
                "timeout_ms": None,
                "working_directory": "/tmp",
                "env": None,
                "user": None,
            },
        }
    ]


def test_local_shell_action_is_sent_verbatim():
    history = parse_history([
        {
            "type": "local_shell_call",
            "id": "ls-1",
            "status": "in_progress",
            "action": {"type": "exec", "command": ["make"], "timeout_ms": None, "env": {"CI": "1"}},
        }
    ])

    action = assemble(history)[0]["tool_calls"][0]["action"]

    assert action["timeout_ms"] is None
    assert action["env"] == {"CI": "1"}
    assert action["command"] == ["make"]


def test_function_call_output_text_and_items():
    history = [
        FunctionCallOutput(call_id="a", output="plain"),
        FunctionCallOutput(
            call_id="b",
            output=FunctionCallOutputPayload(
                content="ignored",
                content_items=[InputText(text="t"), InputImage(image_url="img")],
            ),
        ),
    ]

    assert assemble(history) == [
        {"role": "tool", "tool_call_id": "a", "content": "plain"},
        {
            "role": "tool",
            "tool_call_id": "b",
            "content": [
                {"type": "text", "text": "t"},
                {"type": "image_url", "image_url": {"url": "img"}},
            ],
        },
    ]


def test_custom_tool_call_and_output():
    history = [
        CustomToolCall(id="ct-1", call_id="c", name="apply_patch", input="*** Begin Patch"),
        CustomToolCallOutput(call_id="c", output="applied"),
    ]

    assert assemble(history) == [
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": "ct-1",
                    "type": "custom",
                    "custom": {"name": "apply_patch", "input": "*** Begin Patch"},
                }
            ],
        },
        {"role": "tool", "tool_call_id": "c", "content": "applied"},
    ]


def test_custom_tool_call_ignores_reasoning():
    history = [CustomToolCall(call_id="c", name="n", input="i")]

    message = assemble(history, {0: ReasoningAttachment(text="why")})[0]

    assert "reasoning" not in message
    assert message["tool_calls"][0]["id"] is None


def test_markers_and_reasoning_are_never_emitted():
    history = [
        Reasoning(content=None),
        WebSearchCall(),
        GhostSnapshot(),
        Compaction(encrypted_content="x"),
        Other(type="future_item"),
    ]

    assert assemble(history) == []


def test_reasoning_folds_into_assistant_and_calls_only():
    history = [
        Message(role="user", content=[InputText(text="u")]),
        assistant("a"),
        FunctionCall(name="f", arguments="{}", call_id="c"),
    ]
    attachments = {
        0: ReasoningAttachment(text="not for users"),
        1: ReasoningAttachment(text="thought"),
        2: ReasoningAttachment(text="plan", source=ReasoningSource.REASONING_CONTENT),
    }

    messages = assemble(history, attachments)

    assert "reasoning" not in messages[0]
    assert messages[1]["reasoning"] == "thought"
    assert messages[2]["reasoning_content"] == "plan"


def test_attach_reasoning_prefers_details():
    message = {"role": "assistant", "content": "a"}

    attach_reasoning_fields(
        message,
        ReasoningAttachment(text="text", details={"blob": 1}, source=ReasoningSource.REASONING_CONTENT),
    )

    assert message == {"role": "assistant", "content": "a", "reasoning_details": {"blob": 1}}


def test_attach_reasoning_skips_blank_text():
    message = {"role": "assistant", "content": "a"}

    attach_reasoning_fields(message, ReasoningAttachment(text="  \n"))

    assert message == {"role": "assistant", "content": "a"}


def test_attach_reasoning_uses_generic_key_for_other_sources():
    for source in (None, ReasoningSource.REASONING, ReasoningSource.REASONING_DETAILS):
        message = {"role": "assistant"}
        attach_reasoning_fields(message, ReasoningAttachment(text="r", source=source))
        assert message == {"role": "assistant", "reasoning": "r"}


def test_unknown_objects_are_rejected():
    with pytest.raises(TypeError):
        assemble([object()])


def test_every_item_kind_is_handled():
    from chatwire.domain.models.history_item import ItemType
    from chatwire.domain.request.role_tracker import last_emitted_role

    samples = {
        ItemType.MESSAGE: assistant("a"),
        ItemType.FUNCTION_CALL: FunctionCall(name="f", arguments="{}", call_id="c"),
        ItemType.LOCAL_SHELL_CALL: LocalShellCall(
            status=LocalShellStatus.INCOMPLETE, action=LocalShellAction(command=["true"])
        ),
        ItemType.FUNCTION_CALL_OUTPUT: FunctionCallOutput(call_id="c", output="ok"),
        ItemType.CUSTOM_TOOL_CALL: CustomToolCall(call_id="c", name="n", input="i"),
        ItemType.CUSTOM_TOOL_CALL_OUTPUT: CustomToolCallOutput(call_id="c", output="o"),
        ItemType.REASONING: Reasoning(content=None),
        ItemType.WEB_SEARCH_CALL: WebSearchCall(),
        ItemType.GHOST_SNAPSHOT: GhostSnapshot(),
        ItemType.COMPACTION: Compaction(encrypted_content="x"),
        ItemType.OTHER: Other(),
    }
    assert set(samples) == set(ItemType)

    history = list(samples.values())

    assert last_emitted_role(history) == "tool"
    assert len(assemble(history)) == 6
