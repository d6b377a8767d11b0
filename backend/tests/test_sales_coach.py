"""
Sales Tracker - AI sales coach (prompt building + model output handling)
The OpenAI client is replaced by a stub; no network.
"""

import asyncio
import json
from types import SimpleNamespace

from services.sales_coach import (
    build_sales_coach_prompt,
    build_performance_prompt,
    parse_model_json,
    request_insights,
    sales_coach_fallback,
    performance_fallback,
    COACH_SYSTEM_PROMPT,
)
from services.kpi_metrics import compute_kpi_summary

USER_DATA = compute_kpi_summary([
    {"doorsKnocked": 80, "interactionsSelfGen": 20, "inspectionsRanSelfGen": 4, "dealsSignedSelfGen": 1,
     "leadsAssigned": 5, "initialCallsMade": 5, "inspectionsRanWarmLead": 2, "dealsSignedWarmLead": 1},
])


class StubCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(content):
    completions = StubCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


class TestPrompts:

    def test_sales_coach_prompt_has_metrics_and_contract(self):
        prompt = build_sales_coach_prompt(USER_DATA, "week")

        assert "for the last week" in prompt
        assert "- Doors Knocked: 80" in prompt
        assert "- Leads Assigned: 5" in prompt
        assert "- Self-Generated Interaction Rate: 25.0%" in prompt
        assert '"recommendedActions"' in prompt

    def test_performance_prompt_without_previous_period(self):
        prompt = build_performance_prompt(USER_DATA, None, "month")

        assert "CURRENT PERIOD DATA:" in prompt
        assert "PREVIOUS PERIOD DATA:" not in prompt
        assert '"conversionInsights"' in prompt

    def test_performance_prompt_with_previous_period(self):
        previous = compute_kpi_summary([{"doorsKnocked": 40}])
        prompt = build_performance_prompt(USER_DATA, previous, "month")

        assert "PREVIOUS PERIOD DATA:" in prompt
        assert "- Doors Knocked: 40" in prompt


class TestModelOutput:

    def test_valid_json(self):
        payload = {"overallAssessment": "Solid week.", "strengths": ["a"]}
        assert parse_model_json(json.dumps(payload), sales_coach_fallback) == payload

    def test_plain_text_uses_fallback(self):
        raw = "You did great. " * 30
        result = parse_model_json(raw, sales_coach_fallback)

        assert result["overallAssessment"] == raw[:200]
        assert len(result["recommendedActions"]) == 4

    def test_json_array_uses_fallback(self):
        result = parse_model_json("[1, 2]", performance_fallback)
        assert "keyInsights" in result

    def test_none_content_uses_fallback(self):
        result = parse_model_json(None, sales_coach_fallback)
        assert result["overallAssessment"] == ""


class TestRequestInsights:

    def test_calls_chat_completion(self):
        client, completions = stub_client('{"keyInsights": ["x"]}')
        result = asyncio.run(request_insights(client, COACH_SYSTEM_PROMPT, "prompt", performance_fallback))

        assert result == {"keyInsights": ["x"]}
        [call] = completions.calls
        assert call["messages"][0] == {"role": "system", "content": COACH_SYSTEM_PROMPT}
        assert call["messages"][1] == {"role": "user", "content": "prompt"}
        assert "model" in call and "max_tokens" in call and "temperature" in call
