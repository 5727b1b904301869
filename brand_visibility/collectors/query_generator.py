"""Query-idea generators for the suggestion engine.

Generated queries must be brand-free: they measure whether a brand shows up
organically when people ask generic questions.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx

from brand_visibility.core.config import settings

logger = logging.getLogger(__name__)

API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
IDEAS_PER_REQUEST = 10

_PROMPT = """You are an AI brand visibility analyst. Generate {count} diverse search queries \
that would cause AI models (like ChatGPT, Claude, Perplexity) to compare and recommend \
multiple brands in the "{keywords}" space.

Context:
- Brand to track: {brand}
- Competitors: {competitors}
- Industry keywords: {keywords}

CRITICAL RULE: NEVER include "{brand}" or any competitor names in the queries. These queries \
measure ORGANIC visibility - whether {brand} appears naturally when users search generically.

Query types to mix:
1. Recommendation queries ("What's the best payment processor for SaaS startups?")
2. Generic comparison queries ("Top payment gateways for e-commerce in 2025")
3. Feature-based queries ("Which payment solution has the lowest transaction fees?")
4. Use-case specific queries ("Best payment processor for international transactions")
5. Buying decision and problem-solving queries ("What payment gateway should I use for subscriptions?")

Avoid how-to questions, technical implementation questions and brand-specific questions.
Each query should be 5-15 words and sound like something a person would ask an AI assistant.

Return ONLY a JSON object: {{"queries": ["query 1", "query 2", ...]}}"""


def _parse_queries(text: str) -> list[str]:
    """Extract the query list from an LLM reply.

    Accepts ``{"queries": [...]}``, a bare JSON array, or either wrapped in
    markdown code fences. Raises ValueError when nothing usable is found.
    """
    cleaned = re.sub(r"```(?:json)?\s*", "", text).strip()
    cleaned = re.sub(r"```\s*$", "", cleaned).strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Reply with chatter around the JSON object
        m = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if not m:
            raise ValueError("No JSON object in generator reply") from None
        try:
            data = json.loads(m.group(0))
        except json.JSONDecodeError as exc:
            raise ValueError("Malformed JSON in generator reply") from exc

    items = data.get("queries") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("Generator reply has no query list")

    queries = [item.strip() for item in items if isinstance(item, str) and item.strip()]
    if not queries:
        raise ValueError("Generator reply has an empty query list")
    return queries


def _reply_content(data: object) -> str:
    """Message text of the first choice in a Chat Completions reply."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise ValueError("Generator reply has no choices")
    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise ValueError("Generator reply has no choices")
    content = message.get("content")
    return content if isinstance(content, str) else ""


def _mentions_brand(query: str, brands: Sequence[str]) -> bool:
    """Whole-word, case-insensitive match, so "Ada" does not match "Canada"."""
    return any(b and re.search(rf"(?<!\w){re.escape(b)}(?!\w)", query, re.IGNORECASE) for b in brands)


class QueryIdeaGenerator(ABC):
    """Abstract source of brand-free query ideas."""

    @abstractmethod
    async def generate(
        self,
        brand: str,
        keywords: Sequence[str],
        competitors: Sequence[str],
        exclude: Sequence[str] = (),
    ) -> list[str]:
        """Return query texts not in *exclude* (case-insensitive)."""
        ...


class OpenAiQueryGenerator(QueryIdeaGenerator):
    """Generate query ideas with the OpenAI Chat Completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.8,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    def _build_prompt(self, brand: str, keywords: Sequence[str], competitors: Sequence[str]) -> str:
        return _PROMPT.format(
            count=IDEAS_PER_REQUEST,
            brand=brand,
            competitors=", ".join(competitors) if competitors else "other solutions",
            keywords=", ".join(keywords) if keywords else "this space",
        )

    async def generate(
        self,
        brand: str,
        keywords: Sequence[str],
        competitors: Sequence[str],
        exclude: Sequence[str] = (),
    ) -> list[str]:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": self._build_prompt(brand, keywords, competitors)}],
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(API_URL, json=payload, headers=headers)
            if resp.status_code >= 400:
                logger.error("OpenAI API %d for model=%s: %s", resp.status_code, self.model, resp.text[:500])
            resp.raise_for_status()
            data = resp.json()

        content = _reply_content(data)
        queries = _parse_queries(content)

        excluded = {q.lower() for q in exclude}
        brands = [brand, *competitors]
        filtered = [q for q in queries if q.lower() not in excluded and not _mentions_brand(q, brands)]

        logger.info(
            "Query ideas generated: %d returned, %d after filtering",
            len(queries),
            len(filtered),
        )
        return filtered


def get_query_generator() -> QueryIdeaGenerator | None:
    """Generator configured from settings, or None when no API key is set."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not configured, query suggestions fall back to keyword templates")
        return None
    return OpenAiQueryGenerator(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.suggestion_temperature,
        timeout=settings.openai_timeout,
    )
