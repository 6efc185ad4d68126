"""Unit tests for sanitizer: each cleanup step and the full pipeline."""

from __future__ import annotations

from consult_assistant.services.sanitizer import (
    collapse_blank_lines,
    collapse_emphasis,
    normalize_bullets,
    sanitize,
    strip_code,
    strip_headings,
    strip_links,
)


class TestSteps:
    def test_strip_headings(self) -> None:
        assert strip_headings("## Visits\nText\n###### Deep") == "Visits\nText\nDeep"

    def test_strip_headings_leaves_inline_hash(self) -> None:
        assert strip_headings("Room #5") == "Room #5"

    def test_collapse_emphasis(self) -> None:
        assert collapse_emphasis("***Paid*** on ***Dec 24***") == "**Paid** on **Dec 24**"

    def test_collapse_emphasis_keeps_bold(self) -> None:
        assert collapse_emphasis("**Status:** done") == "**Status:** done"

    def test_strip_fenced_code_keeps_contents(self) -> None:
        assert strip_code("Take:\n```text\nParacetamol 650mg\n```") == "Take:\nParacetamol 650mg"

    def test_strip_single_line_fence(self) -> None:
        assert strip_code("```code```") == "code"

    def test_strip_inline_code(self) -> None:
        assert strip_code("Use `twice daily` dosing") == "Use twice daily dosing"

    def test_strip_links(self) -> None:
        assert strip_links("Join [the call](https://meet.google.com/x) now") == "Join the call now"

    def test_collapse_blank_lines(self) -> None:
        assert collapse_blank_lines("a\n\n\n\nb\n\nc") == "a\n\nb\n\nc"

    def test_collapse_whitespace_only_lines(self) -> None:
        assert collapse_blank_lines("a\n  \n\t\n\nb") == "a\n\nb"

    def test_normalize_bullets(self) -> None:
        assert normalize_bullets("- one\n* two\n• three\n  - nested") == (
            "• one\n• two\n• three\n  • nested"
        )

    def test_normalize_bullets_leaves_bold_lines(self) -> None:
        assert normalize_bullets("**Doctor:** Dr. Rao") == "**Doctor:** Dr. Rao"


class TestSanitize:
    def test_model_output_example(self) -> None:
        raw = "### Summary\n- **Date:** Dec 24\n```code```"
        cleaned = sanitize(raw)
        assert "#" not in cleaned
        assert "`" not in cleaned
        assert "**Date:**" in cleaned
        assert "• **Date:** Dec 24" in cleaned

    def test_full_pipeline(self) -> None:
        raw = (
            "\n# Your consultations\n\n\n\n"
            "* ***Dr. Kumar*** on **Dec 24**\n"
            "- See [details](https://example.com)\n"
            "- Dose: `650mg`\n\n"
        )
        assert sanitize(raw) == (
            "Your consultations\n\n"
            "• **Dr. Kumar** on **Dec 24**\n"
            "• See details\n"
            "• Dose: 650mg"
        )

    def test_plain_text_unchanged(self) -> None:
        assert sanitize("You had one consultation.") == "You had one consultation."
