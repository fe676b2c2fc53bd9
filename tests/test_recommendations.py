"""Tests for recommendation parsing, prompting and the AI clients."""
import json
import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from pathways.core.config import settings
from pathways.core.errors import ConnectivityError, MissingApiKeyError, ParseError
from pathways.infrastructure.gemini import GeminiClient
from pathways.infrastructure.generators import get_text_generator
from pathways.services.recommendations import (
    build_recommendation_prompt,
    count_top_level_objects,
    generate_recommendations,
    parse,
)


class TestParse:
    """Test extraction of recommendations from model text."""

    def test_no_braces(self):
        with pytest.raises(ParseError, match="no JSON found"):
            parse("garbage text with no braces")

    def test_empty_text(self):
        with pytest.raises(ParseError, match="no JSON found"):
            parse("")

    def test_json_inside_prose(self):
        assert parse('prefix {"recommendations":[]} suffix') == []

    def test_invalid_json(self):
        with pytest.raises(ParseError, match="invalid JSON"):
            parse("Here you go: {recommendations: [oops]}")

    def test_payload_passes_through_untouched(self):
        recs = [{"subject": "Physics", "techniques": ["Worked examples"], "extra": {"level": 2}}]
        text = "```json\n" + json.dumps({"recommendations": recs}) + "\n```"

        assert parse(text) == recs

    @pytest.mark.parametrize("payload", ['{"advice": "rest"}', '{"recommendations": null}'])
    def test_missing_recommendations_defaults_to_empty(self, payload):
        assert parse(payload) == []

    @pytest.mark.parametrize("value", ['{"subject": "Physics"}', "{}", '""', "0", "false"])
    def test_recommendations_must_be_a_list(self, value):
        with pytest.raises(ParseError, match="not a list"):
            parse('{"recommendations": ' + value + "}")

    def test_deeply_nested_reply(self):
        text = "reply: " + "[" * 100000 + "]" * 100000 + ' {"recommendations": ' + "[" * 5000 + "]" * 5000 + "}"

        with pytest.raises(ParseError, match="invalid JSON"):
            parse(text)

    def test_braces_inside_strings(self):
        assert parse('{"recommendations": [{"subject": "Sets {A, B}"}]}') == [{"subject": "Sets {A, B}"}]

    def test_greedy_span_over_two_objects_warns(self, caplog):
        text = 'First {"note": 1} then {"recommendations": []}'

        with caplog.at_level(logging.WARNING, logger="pathways.services.recommendations"):
            with pytest.raises(ParseError, match="invalid JSON"):
                parse(text)

        warning = next(r for r in caplog.records if r.levelno == logging.WARNING)
        assert warning.candidate_objects == 2
        assert warning.span_length == len('{"note": 1} then {"recommendations": []}')

    def test_single_object_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pathways.services.recommendations"):
            parse('{"recommendations": [{"subject": "Math"}]}')

        assert not caplog.records


class TestCountTopLevelObjects:
    """Test the brace scanner."""

    @pytest.mark.parametrize("span,count", [
        ('{"a": {"b": 1}}', 1),
        ('{"a": "}"} {"b": 1}', 2),
        ('{"a": "\\"}"}', 1),
        ("{} {} {}", 3),
        ("{", 0),
    ])
    def test_counts(self, span, count):
        assert count_top_level_objects(span) == count


class TestPrompt:
    """Test prompt construction."""

    def test_lists_scores_and_focus_threshold(self, make_result):
        prompt = build_recommendation_prompt("Maya Chen", [make_result("Mathematics", 54), make_result("Physics", 45, total=50)])

        assert "Student: Maya Chen" in prompt
        assert "- Mathematics: 54/100 (54.0%)" in prompt
        assert "- Physics: 45/50 (90.0%)" in prompt
        assert "below 70%" in prompt
        assert '"recommendations"' in prompt

    def test_without_results(self):
        assert "No test results recorded" in build_recommendation_prompt("Leo Park", [])


class TestGenerateRecommendations:
    """Test the generate-then-parse flow."""

    @pytest.mark.asyncio
    async def test_parses_generator_output(self, make_result):
        generator = AsyncMock()
        generator.generate.return_value = 'Sure! {"recommendations": [{"subject": "Mathematics"}]}'

        recs = await generate_recommendations(generator, "Maya Chen", [make_result("Mathematics", 54)])

        assert recs == [{"subject": "Mathematics"}]
        prompt = generator.generate.await_args.args[0]
        assert "Mathematics: 54/100" in prompt

    @pytest.mark.asyncio
    async def test_connectivity_errors_propagate(self, make_result):
        generator = AsyncMock()
        generator.generate.side_effect = ConnectivityError("AI service unreachable", service="ai", status_code=502)

        with pytest.raises(ConnectivityError):
            await generate_recommendations(generator, "Maya Chen", [make_result()])

    @pytest.mark.asyncio
    async def test_parse_errors_propagate(self, make_result):
        generator = AsyncMock()
        generator.generate.return_value = "I cannot help with that."

        with pytest.raises(ParseError):
            await generate_recommendations(generator, "Maya Chen", [make_result()])


def _gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestGeminiClient:
    """Test the REST client against a mock transport."""

    @pytest.mark.asyncio
    async def test_sends_key_header_and_returns_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_reply('{"recommendations": []}'))

        client = GeminiClient(api_key="test-key", model="gemini-test", transport=httpx.MockTransport(handler))
        text = await client.generate("hello")

        assert text == '{"recommendations": []}'
        assert seen["key"] == "test-key"
        assert seen["url"].endswith("/models/gemini-test:generateContent")
        assert seen["body"] == {"contents": [{"parts": [{"text": "hello"}]}]}

    @pytest.mark.asyncio
    async def test_error_status_becomes_connectivity_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(429, text="quota exceeded"))
        client = GeminiClient(api_key="test-key", transport=transport)

        with pytest.raises(ConnectivityError) as exc_info:
            await client.generate("hello")

        assert exc_info.value.status_code == 502
        assert "quota exceeded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_network_failure_becomes_connectivity_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        client = GeminiClient(api_key="test-key", transport=httpx.MockTransport(handler))

        with pytest.raises(ConnectivityError):
            await client.generate("hello")

    @pytest.mark.asyncio
    async def test_unexpected_body(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"candidates": []}))
        client = GeminiClient(api_key="test-key", transport=transport)

        with pytest.raises(ConnectivityError, match="Unexpected Gemini response"):
            await client.generate("hello")

    def test_requires_a_key(self):
        with patch.object(settings, "gemini_api_key", None):
            with pytest.raises(MissingApiKeyError):
                GeminiClient()


class TestGetTextGenerator:
    """Test generator selection."""

    def test_request_key_uses_gemini(self):
        generator = get_text_generator("request-key")

        assert isinstance(generator, GeminiClient)
        assert generator.api_key == "request-key"

    def test_configured_key(self):
        with patch.object(settings, "ai_provider", "gemini"), patch.object(settings, "gemini_api_key", "server-key"):
            assert get_text_generator().api_key == "server-key"

    def test_vertex_without_key(self):
        from pathways.infrastructure.vertex import VertexTextGenerator

        with patch.object(settings, "ai_provider", "vertex"):
            assert isinstance(get_text_generator(), VertexTextGenerator)

    def test_no_key_anywhere(self):
        with patch.object(settings, "ai_provider", "gemini"), patch.object(settings, "gemini_api_key", None):
            with pytest.raises(MissingApiKeyError):
                get_text_generator()
