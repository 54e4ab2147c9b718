"""Minimal markdown rendering for tutor replies."""

import html
import re

_BULLET = re.compile(r"^[-*]\s+")
_NUMBERED = re.compile(r"^\d+\.\s+")


def _wrap_lists(lines: list[str], marker: re.Pattern[str], tag: str, css: str) -> list[str]:
    result: list[str] = []
    in_list = False
    for line in lines:
        stripped = line.strip()
        if marker.match(stripped):
            if not in_list:
                result.append(f'<{tag} class="{css}">')
                in_list = True
            result.append(f"<li>{marker.sub('', stripped)}</li>")
            continue
        if in_list:
            result.append(f"</{tag}>")
            in_list = False
        result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return result


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: bold, italic, inline code, code blocks, links, lists.
    Input is HTML-escaped first.
    """
    text = html.escape(text, quote=False)

    text = re.sub(
        r"```(\w*)\n?([\s\S]*?)```",
        r'<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs">'
        r"<code>\2</code></pre>",
        text,
    )
    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)
    text = re.sub(r"\*([^*\n]+)\*", r"<em>\1</em>", text)
    text = re.sub(
        r"\[([^\]]+)\]\((https?://[^)\s]+)\)",
        r'<a href="\2" class="text-blue-600 underline" target="_blank">\1</a>',
        text,
    )

    lines = _wrap_lists(text.split("\n"), _BULLET, "ul", "list-disc list-inside my-2 space-y-1")
    lines = _wrap_lists(lines, _NUMBERED, "ol", "list-decimal list-inside my-2 space-y-1")

    return "<br>".join(lines)
