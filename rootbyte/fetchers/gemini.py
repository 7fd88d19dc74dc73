"""
Optional text generation through Gemini's OpenAI-compatible endpoint.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from rootbyte.config import gemini_api_key, get_config
from rootbyte.core.article import NewsItem
from rootbyte.formatters.html import paragraph, render_body

# Configure logging
logger = logging.getLogger(__name__)

BODY_PROMPT = """You are a tech journalist. Write a 2-paragraph breaking news brief (under 150 words total) for this trending story.
Headline: "{headline}"
Sources covering it:
{sources}
Write in present tense. Be factual. No clickbait. Format as plain HTML <p> tags."""

ROOT_CONNECTION_PROMPT = """You are writing a 1-sentence "root connection" for a tech history website.
The breaking news headline is: "{headline}"
The historical root article slug is: "{slug}"
Write one sentence (under 50 words) explaining the historical connection between this news and the root article. Be specific and factual."""


@dataclass
class GenerationResult:
    """
    Generated text, or the templated fallback used in its place.
    """
    text: Optional[str]
    fallback: bool


def fallback_body(headline: str, items: Sequence[NewsItem]) -> str:
    """Body used whenever generation is skipped or fails."""
    description = items[0].description if items else ""
    return paragraph(description or headline)


def format_sources(items: Sequence[NewsItem], budget: int) -> str:
    lines = [f"- {item.title} ({item.source_name})" for item in items]
    return "\n".join(lines)[:budget]


class SummaryGenerator:
    """
    Turns headlines into short copy. Never raises: without a key, or on any
    failure, the caller receives a fallback result.
    """
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 base_url: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self.api_key = api_key if api_key is not None else gemini_api_key()
        self.model = model or get_config('gemini.model')
        self.base_url = base_url or get_config('gemini.base_url')
        self.source_char_budget = get_config('gemini.source_char_budget', 600)
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, max_retries=0)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def _complete(self, prompt: str) -> Optional[str]:
        """
        Send one prompt and return the stripped reply, or None on failure.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            text = response.choices[0].message.content
        except OpenAIError as e:
            logger.warning(f"Gemini error (non-fatal): {e}")
            return None
        except Exception as e:
            logger.warning(f"Unexpected Gemini failure (non-fatal): {e}")
            return None

        if not isinstance(text, str) or not text.strip():
            logger.warning("Gemini returned an empty response")
            return None
        return text.strip()

    async def generate_body(self, headline: str, items: List[NewsItem]) -> GenerationResult:
        """
        Write a short HTML brief for a breaking story.

        Args:
            headline: Banner headline
            items: News items covering the story

        Returns:
            GenerationResult holding HTML; fallback=True when the templated
            body was used
        """
        if not self.configured:
            return GenerationResult(fallback_body(headline, items), fallback=True)

        prompt = BODY_PROMPT.format(
            headline=headline,
            sources=format_sources(items, self.source_char_budget),
        )
        text = await self._complete(prompt)
        body = render_body(text) if text else ""
        if not body:
            return GenerationResult(fallback_body(headline, items), fallback=True)
        return GenerationResult(body, fallback=False)

    async def generate_root_connection(self, headline: str, slug: str) -> GenerationResult:
        """
        Write one sentence linking a headline to a root article.

        The fallback carries no text: the snapshot stores ``null``.
        """
        if not self.configured:
            return GenerationResult(None, fallback=True)

        text = await self._complete(ROOT_CONNECTION_PROMPT.format(headline=headline, slug=slug))
        if text is None:
            return GenerationResult(None, fallback=True)
        return GenerationResult(text, fallback=False)
