"""
HTML helpers for the bodies written into breaking.json.
"""
import html
import logging
import mistune
from bs4 import BeautifulSoup

# Configure logging
logger = logging.getLogger(__name__)

_markdown = mistune.create_markdown(escape=False)


def paragraph(text: str) -> str:
    """Wrap plain text in a single escaped ``<p>`` element."""
    return f"<p>{html.escape(text.strip(), quote=False)}</p>"


def paragraphs(*texts: str) -> str:
    return "".join(paragraph(text) for text in texts if text and text.strip())


def looks_like_html(text: str) -> bool:
    soup = BeautifulSoup(text, 'html.parser')
    return soup.find() is not None


def render_body(text: str) -> str:
    """
    Normalise generated copy into HTML.

    Models are asked for ``<p>`` markup but often answer in Markdown or plain
    prose; anything without tags is run through the Markdown renderer. Code
    fences wrapped around an HTML answer are removed first.

    Args:
        text: Raw generated text

    Returns:
        HTML string, empty when the input is blank
    """
    text = (text or "").strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()

    if not text:
        return ""
    if looks_like_html(text):
        return text

    logger.debug("Generated body has no markup, rendering as Markdown")
    return _markdown(text).strip()
