"""Tests for the OpenAI recommender adapter. No network calls are made."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from openai import OpenAIError

from ctmap.adapters.llm.openai_recommender import OpenAIRecommender, parse_recommendation
from ctmap.domain.errors import ExternalCallError

REPLY = """```json
{
  "advocateId": "adv1",
  "advocateName": "Rajesh Kumar",
  "confidence": 14,
  "factors": ["District match", "Home Loan expertise"],
  "reason": "Closest advocate with capacity"
}
```"""


def test_parse_strips_fences_and_clamps_confidence():
    rec = parse_recommendation(REPLY)
    assert rec.advocate_id == "adv1"
    assert rec.advocate_name == "Rajesh Kumar"
    assert rec.confidence == 10
    assert rec.factors == ("District match", "Home Loan expertise")


def test_parse_defaults():
    rec = parse_recommendation('{"advocateId": "adv2", "confidence": "n/a"}')
    assert rec.confidence == 1
    assert rec.reason == "AI allocation"
    assert rec.factors == ()


@pytest.mark.parametrize(
    "raw",
    ["not json at all", '["adv1"]', '{"advocateName": "Nobody"}', '{"advocateId": 7}'],
)
def test_parse_rejects_unusable_reply(raw):
    with pytest.raises(ExternalCallError):
        parse_recommendation(raw)


@pytest.mark.asyncio
async def test_without_key_is_unavailable():
    recommender = OpenAIRecommender(api_key="")
    assert not recommender.is_available
    with pytest.raises(ExternalCallError, match="OPENAI_API_KEY"):
        await recommender.recommend({"assignment": {"id": "a1"}})


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.mark.asyncio
async def test_recommend_sends_payload(monkeypatch):
    recommender = OpenAIRecommender(api_key="sk-test", model="gpt-test")
    sent = {}

    async def fake_create(**kwargs):
        sent.update(kwargs)
        return _reply(REPLY)

    monkeypatch.setattr(recommender._client.chat.completions, "create", fake_create)
    rec = await recommender.recommend({"assignment": {"id": "a1"}, "advocates": []})

    assert rec.advocate_id == "adv1"
    assert sent["model"] == "gpt-test"
    assert '"a1"' in sent["messages"][1]["content"]


@pytest.mark.asyncio
async def test_client_error_becomes_external_call_error(monkeypatch):
    recommender = OpenAIRecommender(api_key="sk-test")

    async def fake_create(**kwargs):
        raise OpenAIError("connection reset")

    monkeypatch.setattr(recommender._client.chat.completions, "create", fake_create)
    with pytest.raises(ExternalCallError, match="connection reset"):
        await recommender.recommend({"assignment": {"id": "a1"}})


@pytest.mark.asyncio
async def test_empty_choices_is_external_call_error(monkeypatch):
    recommender = OpenAIRecommender(api_key="sk-test")

    async def fake_create(**kwargs):
        return SimpleNamespace(choices=[])

    monkeypatch.setattr(recommender._client.chat.completions, "create", fake_create)
    with pytest.raises(ExternalCallError, match="no choices"):
        await recommender.recommend({"assignment": {"id": "a1"}})


def test_client_does_not_retry_on_its_own():
    recommender = OpenAIRecommender(api_key="sk-test")
    assert recommender._client.max_retries == 0
