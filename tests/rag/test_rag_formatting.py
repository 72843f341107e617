"""
Reply Formatting Tests

Markdown → WhatsApp emphasis, length cap, footer.
"""

import pytest

from rag.formatting import (
    MAX_MESSAGE_CHARS,
    RESET_FOOTER,
    format_reply,
    markdown_to_whatsapp,
    sources_line,
)


class TestMarkdownToWhatsApp:
    """Bold first, then italic."""

    def test_bold_before_italic(self):
        assert markdown_to_whatsapp("**hi** *there*") == "*hi* _there_"

    @pytest.mark.parametrize("text,expected", [
        ("**bold**", "*bold*"),
        ("*italic*", "_italic_"),
        ("plain text", "plain text"),
        ("**a** and **b**", "*a* and *b*"),
        ("*a* and *b*", "_a_ and _b_"),
        ("5 * 3 = 15", "5 * 3 = 15"),
        ("1. **Step one**: *carefully*", "1. *Step one*: _carefully_"),
    ])
    def test_conversions(self, text, expected):
        assert markdown_to_whatsapp(text) == expected

    def test_emphasis_does_not_span_lines(self):
        text = "*start\nend*"
        assert markdown_to_whatsapp(text) == text


class TestFormatReply:
    def test_footer_appended(self):
        assert format_reply("Hello") == "Hello" + RESET_FOOTER
        assert RESET_FOOTER == "\n\nType 'reset' to start a new conversation."

    def test_truncates_before_footer(self):
        reply = format_reply("x" * 2000)

        assert reply == "x" * MAX_MESSAGE_CHARS + RESET_FOOTER
        assert len(reply) > MAX_MESSAGE_CHARS

    def test_exact_limit_not_truncated(self):
        assert format_reply("y" * 1500) == "y" * 1500 + RESET_FOOTER

    def test_truncation_applies_after_conversion(self):
        # "**" pairs shrink by two characters each before the cut
        reply = format_reply("**" + "z" * 1500 + "**")
        assert reply == "*" + "z" * 1499 + RESET_FOOTER

    def test_sources_hidden_by_default(self):
        assert format_reply("Hi", sources=[{"id": 1}]) == "Hi" + RESET_FOOTER

    def test_sources_line_when_enabled(self):
        reply = format_reply("Hi", sources=[{"id": 1}, {"id": 2}], show_sources=True)

        assert reply == (
            "Hi\n\n_Based on 2 document(s) from our knowledge base_" + RESET_FOOTER
        )

    def test_no_sources_line_without_sources(self):
        assert sources_line([]) == ""
        assert format_reply("Hi", sources=[], show_sources=True) == "Hi" + RESET_FOOTER
