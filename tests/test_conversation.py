"""Message model and append-only Conversation tests."""
import pytest
from pydantic import ValidationError

from encounter_etl.agent.conversation import Conversation
from encounter_etl.agent.exceptions import ConversationError
from encounter_etl.agent.models import Message, Role, ToolName

from tests.conftest import tool_call


def seeded() -> Conversation:
    return Conversation([Message.system("sys"), Message.user("note")])


class TestMessage:
    """Test Message role constraints."""

    def test_tool_message_requires_call_id(self):
        with pytest.raises(ValidationError):
            Message(role=Role.TOOL, content="x")

    def test_only_assistant_carries_tool_calls(self):
        with pytest.raises(ValidationError):
            Message(role=Role.USER, content="x", tool_calls=[tool_call("a", "uuidv4", {})])

    def test_only_tool_carries_call_id(self):
        with pytest.raises(ValidationError):
            Message(role=Role.ASSISTANT, content="x", tool_call_id="a")

    def test_assistant_with_tool_calls_may_have_no_content(self):
        message = Message.assistant(tool_calls=[tool_call("a", "uuidv4", {})])
        assert message.content is None
        assert message.requests_tools is True

    def test_plain_assistant_does_not_request_tools(self):
        assert Message.assistant(content="{}").requests_tools is False

    def test_tool_name_parse(self):
        assert ToolName.parse("fhir-validate") is ToolName.FHIR_VALIDATE
        assert ToolName.parse("uuidv4") is ToolName.UUIDV4
        assert ToolName.parse("unknown-tool") is None


class TestConversation:
    """Test append-only log and tool-call correlation."""

    def test_appends_in_order(self):
        conversation = seeded()
        conversation.append(Message.assistant(content="{}"))

        assert len(conversation) == 3
        assert [m.role for m in conversation] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
        assert conversation.last.content == "{}"

    def test_messages_is_snapshot(self):
        conversation = seeded()
        snapshot = conversation.messages
        conversation.append(Message.assistant(content="{}"))

        assert len(snapshot) == 2
        assert isinstance(snapshot, tuple)

    def test_outstanding_ids_track_replies(self):
        conversation = seeded()
        conversation.append(Message.assistant(tool_calls=[
            tool_call("a", "uuidv4", {}),
            tool_call("b", "uuidv4", {}),
        ]))
        assert conversation.outstanding_tool_call_ids() == ("a", "b")

        conversation.append(Message.tool("a", "id-1"))
        assert conversation.outstanding_tool_call_ids() == ("b",)

        conversation.append(Message.tool("b", "id-2"))
        assert conversation.outstanding_tool_call_ids() == ()

    def test_tool_result_without_request_rejected(self):
        conversation = seeded()
        with pytest.raises(ConversationError):
            conversation.append(Message.tool("a", "id-1"))

    def test_tool_result_with_wrong_id_rejected(self):
        conversation = seeded()
        conversation.append(Message.assistant(tool_calls=[tool_call("a", "uuidv4", {})]))
        with pytest.raises(ConversationError):
            conversation.append(Message.tool("zzz", "id-1"))

    def test_duplicate_tool_result_rejected(self):
        conversation = seeded()
        conversation.append(Message.assistant(tool_calls=[tool_call("a", "uuidv4", {})]))
        conversation.append(Message.tool("a", "id-1"))
        with pytest.raises(ConversationError):
            conversation.append(Message.tool("a", "id-2"))

    def test_only_latest_assistant_turn_is_outstanding(self):
        conversation = seeded()
        conversation.append(Message.assistant(tool_calls=[tool_call("a", "uuidv4", {})]))
        conversation.append(Message.tool("a", "id-1"))
        conversation.append(Message.assistant(tool_calls=[tool_call("b", "uuidv4", {})]))

        assert conversation.outstanding_tool_call_ids() == ("b",)
        with pytest.raises(ConversationError):
            conversation.append(Message.tool("a", "again"))
