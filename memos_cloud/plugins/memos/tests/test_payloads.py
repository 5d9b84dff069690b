"""Tests for the request payload builders."""

from memos_cloud.plugins.memos.config_loader import MemosSettings
from memos_cloud.plugins.memos.identity import ConversationCounter
from memos_cloud.plugins.memos.models import RuntimeContext, SelectedMessage
from memos_cloud.plugins.memos.payloads import build_add_message_payload, build_search_payload

CTX = RuntimeContext(session_key="agent:main:main", agent_id="main")


class TestSearchPayload:
    def test_global_recall_payload(self):
        settings = MemosSettings(user_id="alice")
        payload = build_search_payload(settings, "what do I like?", CTX)

        assert payload == {
            "user_id": "alice",
            "query": "what do I like?",
            "memory_limit_number": 6,
            "include_preference": True,
            "preference_limit_number": 6,
            "include_tool_memory": False,
            "tool_memory_limit_number": 6,
        }

    def test_scoped_recall_attaches_conversation(self):
        settings = MemosSettings(recall_global=False)
        payload = build_search_payload(settings, "hello", CTX)
        assert payload["conversation_id"] == "agent:main:main"

    def test_scoped_recall_uses_counter(self):
        settings = MemosSettings(recall_global=False, conversation_suffix_mode="counter")
        counter = ConversationCounter()
        counter.increment("agent:main:main")
        payload = build_search_payload(settings, "hello", CTX, counter)
        assert payload["conversation_id"] == "agent:main:main#1"

    def test_prefix_applied_before_truncation(self):
        settings = MemosSettings(query_prefix="ctx: ", max_query_chars=8)
        payload = build_search_payload(settings, "abcdefgh", CTX)
        assert payload["query"] == "ctx: abc"

    def test_zero_max_query_uses_default(self):
        settings = MemosSettings(max_query_chars=0)
        payload = build_search_payload(settings, "x" * 2500, CTX)
        assert len(payload["query"]) == 2000

    def test_optional_fields(self):
        settings = MemosSettings(
            filter={"tag": "work"},
            knowledgebase_ids=("kb1", "kb2"),
            include_tool_memory=True,
            memory_limit_number=3,
        )
        payload = build_search_payload(settings, "hello", CTX)
        assert payload["filter"] == {"tag": "work"}
        assert payload["knowledgebase_ids"] == ["kb1", "kb2"]
        assert payload["include_tool_memory"] is True
        assert payload["memory_limit_number"] == 3

    def test_empty_knowledgebase_list_omitted(self):
        payload = build_search_payload(MemosSettings(), "hello", CTX)
        assert "knowledgebase_ids" not in payload
        assert "filter" not in payload


class TestAddMessagePayload:
    MESSAGES = [SelectedMessage("user", "hi"), SelectedMessage("assistant", "hello")]

    def test_default_payload(self):
        settings = MemosSettings(user_id="alice")
        payload = build_add_message_payload(settings, self.MESSAGES, CTX)

        assert payload == {
            "user_id": "alice",
            "conversation_id": "agent:main:main",
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
            ],
            "tags": ["openclaw"],
            "info": {"source": "openclaw", "sessionKey": "agent:main:main", "agentId": "main"},
            "allow_public": False,
            "async_mode": True,
        }

    def test_conversation_id_present_even_in_global_recall(self):
        settings = MemosSettings(recall_global=True)
        payload = build_add_message_payload(settings, self.MESSAGES, CTX)
        assert payload["conversation_id"] == "agent:main:main"

    def test_optional_fields(self):
        settings = MemosSettings(
            agent_id="agent-7",
            app_id="app-1",
            tags=(),
            allow_public=True,
            allow_knowledgebase_ids=("kb1",),
            async_mode=False,
        )
        payload = build_add_message_payload(settings, self.MESSAGES, CTX)
        assert payload["agent_id"] == "agent-7"
        assert payload["app_id"] == "app-1"
        assert "tags" not in payload
        assert payload["allow_public"] is True
        assert payload["allow_knowledgebase_ids"] == ["kb1"]
        assert payload["async_mode"] is False

    def test_info_overrides_win(self):
        settings = MemosSettings(info={"source": "custom", "team": "core"})
        payload = build_add_message_payload(settings, self.MESSAGES, CTX)
        assert payload["info"] == {
            "source": "custom",
            "sessionKey": "agent:main:main",
            "agentId": "main",
            "team": "core",
        }

    def test_missing_context(self):
        payload = build_add_message_payload(MemosSettings(conversation_id="c1"), self.MESSAGES)
        assert payload["conversation_id"] == "c1"
        assert payload["info"] == {"source": "openclaw", "sessionKey": None, "agentId": None}
