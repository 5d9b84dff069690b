"""Integration tests: the MemOS plugin driven through HookRegistry."""

import json
import logging
from unittest.mock import Mock, patch

import pytest
import requests

from memos_cloud.plugins import HookRegistry, HookResult
from memos_cloud.plugins.base import AGENT_END, BEFORE_AGENT_START, COMMAND_NEW
from memos_cloud.plugins.memos import MemosCloudPlugin

PLUGIN_ID = "memos-cloud-openclaw-plugin"
POST = "memos_cloud.plugins.memos.client.requests.post"
CTX = {"sessionKey": "agent:main:main", "agentId": "main"}


def ok_response(body):
    response = Mock()
    response.status_code = 200
    response.iter_content.return_value = iter([json.dumps(body).encode()])
    return response


class TestDiscovery:
    def test_discover_finds_plugin(self):
        registry = HookRegistry()
        registry.discover()
        assert PLUGIN_ID in registry.list_available()
        assert isinstance(registry.get_plugin(PLUGIN_ID), MemosCloudPlugin)

    def test_discover_is_idempotent(self):
        registry = HookRegistry()
        registry.discover()
        assert registry.discover() == []
        assert registry.list_available().count(PLUGIN_ID) == 1

    def test_unknown_kind_finds_nothing(self):
        registry = HookRegistry()
        assert registry.discover(plugin_kind="model_provider") == []


class TestEnable:
    def test_enable_unknown_plugin(self):
        with pytest.raises(ValueError, match="not found"):
            HookRegistry().enable("nope")

    def test_enable_twice(self):
        registry = HookRegistry()
        registry.add_plugin(MemosCloudPlugin())
        registry.enable(PLUGIN_ID, config={"apiKey": "k"})
        with pytest.raises(ValueError, match="already enabled"):
            registry.enable(PLUGIN_ID, config={"apiKey": "k"})

    def test_enable_subscribes_hooks(self):
        registry = HookRegistry()
        registry.add_plugin(MemosCloudPlugin())
        api = registry.enable(
            PLUGIN_ID, config={"apiKey": "k", "conversationSuffixMode": "counter"}
        )

        assert api.plugin_config["apiKey"] == "k"
        assert registry.list_enabled() == [PLUGIN_ID]
        assert registry.list_events() == sorted([AGENT_END, BEFORE_AGENT_START, COMMAND_NEW])
        assert registry.handler_count(BEFORE_AGENT_START) == 1
        assert registry.handler_count(COMMAND_NEW) == 1


class TestDispatch:
    def _registry(self, **config):
        registry = HookRegistry()
        plugin = MemosCloudPlugin()
        registry.add_plugin(plugin)
        registry.enable(PLUGIN_ID, config={"apiKey": "secret", "userId": "alice", **config})
        return registry, plugin

    @patch(POST)
    def test_recall_then_capture(self, mock_post):
        mock_post.side_effect = [
            ok_response({"data": {"memory_detail_list": [{"memory_value": "Likes tea"}]}}),
            ok_response({"code": 0}),
        ]
        registry, _ = self._registry()

        results = registry.emit(BEFORE_AGENT_START, {"prompt": "what do I drink?"}, CTX)
        assert len(results) == 1
        assert isinstance(results[0], HookResult)
        assert "- Likes tea" in results[0].prepend_context

        registry.emit(
            AGENT_END,
            {
                "success": True,
                "messages": [
                    {"role": "user", "content": "what do I drink?"},
                    {"role": "assistant", "content": "Tea."},
                ],
            },
            CTX,
        )

        search_call, add_call = mock_post.call_args_list
        assert search_call[0][0].endswith("/search/memory")
        assert add_call[0][0].endswith("/add/message")
        assert add_call[1]["json"]["messages"][-1] == {"role": "assistant", "content": "Tea."}
        assert add_call[1]["headers"]["Authorization"] == "Token secret"

    @patch(POST)
    def test_network_failure_never_reaches_host(self, mock_post, caplog):
        mock_post.side_effect = requests.ConnectionError("down")
        registry, _ = self._registry(retries=0)

        with caplog.at_level(logging.WARNING):
            results = registry.emit(BEFORE_AGENT_START, {"prompt": "hello there"}, CTX)

        assert results == []
        assert "recall failed" in caplog.text

    def test_trigger_new_command(self):
        registry, plugin = self._registry(conversationSuffixMode="counter")
        registry.trigger(COMMAND_NEW, {"type": "command", "action": "new"}, CTX)
        assert plugin.counter.get("agent:main:main") == 1

    @patch(POST)
    def test_failing_handler_does_not_stop_others(self, mock_post, caplog):
        mock_post.return_value = ok_response(
            {"data": {"memory_detail_list": [{"memory_value": "Likes tea"}]}}
        )

        class BrokenPlugin:
            id = "broken"
            kind = "lifecycle"

            def register(self, api):
                api.on(BEFORE_AGENT_START, self.explode)

            def explode(self, event, ctx):
                raise RuntimeError("boom")

        registry = HookRegistry()
        registry.add_plugin(BrokenPlugin())
        registry.add_plugin(MemosCloudPlugin())
        registry.enable("broken")
        registry.enable(PLUGIN_ID, config={"apiKey": "secret"})

        with caplog.at_level(logging.ERROR):
            results = registry.emit(BEFORE_AGENT_START, {"prompt": "hello there"}, CTX)

        assert len(results) == 1
        assert "Handler from 'broken' failed" in caplog.text
