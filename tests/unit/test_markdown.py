"""Unit tests for tutor reply rendering."""

from src.ui.markdown import markdown_to_html


class TestMarkdownToHtml:
    def test_escapes_html(self) -> None:
        assert "<script>" not in markdown_to_html("<script>alert(1)</script>")

    def test_inline_formatting(self) -> None:
        html = markdown_to_html("**bold** and *italic* and `code`")

        assert "<strong>bold</strong>" in html
        assert "<em>italic</em>" in html
        assert "code</code>" in html

    def test_lists_are_wrapped(self) -> None:
        html = markdown_to_html("- one\n- two\n\n1. first\n2. second")

        assert html.count("<li>") == 4
        assert "<ul" in html and "</ul>" in html
        assert "<ol" in html and "</ol>" in html
