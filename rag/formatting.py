"""
Reply formatting for WhatsApp.

WhatsApp uses *bold* and _italic_, the RAG backend answers in markdown.
"""

import re
from typing import Sequence

MAX_MESSAGE_CHARS = 1500

RESET_FOOTER = "\n\nType 'reset' to start a new conversation."

# Bold alternative comes first so "**x**" is consumed before the single-asterisk
# rule can see it.
_EMPHASIS_RE = re.compile(r"\*\*(.*?)\*\*|\*(.*?)\*")


def _emphasis(match: "re.Match[str]") -> str:
    bold = match.group(1)
    if bold is not None:
        return f"*{bold}*"
    return f"_{match.group(2)}_"


def markdown_to_whatsapp(text: str) -> str:
    """Convert **bold** to *bold* and *italic* to _italic_."""
    return _EMPHASIS_RE.sub(_emphasis, text)


def truncate(text: str, limit: int = MAX_MESSAGE_CHARS) -> str:
    return text[:limit]


def sources_line(sources: Sequence) -> str:
    if not sources:
        return ""
    return f"\n\n_Based on {len(sources)} document(s) from our knowledge base_"


def format_reply(text: str, sources: Sequence = (), show_sources: bool = False) -> str:
    """
    Turn a RAG answer into the WhatsApp reply body.

    Markdown is converted, the body is cut to MAX_MESSAGE_CHARS, then the
    optional sources line and the reset footer are appended (the footer may
    take the total past the limit).
    """
    body = truncate(markdown_to_whatsapp(text))
    if show_sources:
        body += sources_line(sources)
    return body + RESET_FOOTER
