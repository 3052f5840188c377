"""Markdown rendered to styled terminal lines.

Parsing is done by markdown-it-py (CommonMark plus GFM tables and
strikethrough); this module only walks the resulting syntax tree and
lays blocks out for a given width.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from acai.tui import style
from acai.tui.utils import apply_background_to_line, pad_to_width, visible_width, wrap_text_with_ansi

_parser = MarkdownIt("commonmark").enable(["table", "strikethrough"])
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class MarkdownTheme:
    heading: Callable[[str], str] = style.bold
    code: Callable[[str], str] = style.cyan
    code_block: Callable[[str], str] = style.plain
    link: Callable[[str], str] = style.underline
    link_url: Callable[[str], str] = style.dim
    quote_border: Callable[[str], str] = style.gray
    hr: Callable[[str], str] = style.dim
    table_border: Callable[[str], str] = style.dim
    bullet: Callable[[str], str] = style.cyan


class Markdown:
    def __init__(
        self,
        text: str = "",
        *,
        padding_x: int = 1,
        padding_y: int = 0,
        theme: MarkdownTheme | None = None,
        text_style: Callable[[str], str] | None = None,
        custom_bg_fn: Callable[[str], str] | None = None,
    ) -> None:
        self._text = text
        self._padding_x = padding_x
        self._padding_y = padding_y
        self._theme = theme or MarkdownTheme()
        self._text_style = text_style or style.plain
        self._bg_fn = custom_bg_fn
        self._cache: tuple[int, list[str]] | None = None

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text != self._text:
            self._text = text
            self._cache = None

    def set_text_style(self, text_style: Callable[[str], str] | None) -> None:
        self._text_style = text_style or style.plain
        self._cache = None

    def invalidate(self) -> None:
        self._cache = None

    def render(self, width: int) -> list[str]:
        if self._cache is not None and self._cache[0] == width:
            return self._cache[1]
        lines: list[str] = []
        if self._text.strip():
            inner = max(1, width - 2 * self._padding_x)
            body = self._blocks(SyntaxTreeNode(_parser.parse(self._text)).children, inner)
            while body and body[-1] == "":
                body.pop()
            margin = " " * self._padding_x
            blank = [""] * self._padding_y
            lines = [self._paint(margin + line if line else "", width) for line in (*blank, *body, *blank)]
        self._cache = (width, lines)
        return lines

    def _paint(self, line: str, width: int) -> str:
        if self._bg_fn is not None:
            return apply_background_to_line(line, width, self._bg_fn)
        return line

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _blocks(self, nodes: list[SyntaxTreeNode], width: int) -> list[str]:
        lines: list[str] = []
        for node in nodes:
            lines.extend(self._block(node, width))
        return lines

    def _block(self, node: SyntaxTreeNode, width: int) -> list[str]:
        kind = node.type
        theme = self._theme
        if kind == "heading":
            level = int(node.tag[1])
            text = self._inline(node.children[0]) if node.children else ""
            if level > 2:
                text = style.dim("#" * level) + " " + text
            return [*wrap_text_with_ansi(theme.heading(text), width), ""]
        if kind == "paragraph":
            text = self._inline(node.children[0]) if node.children else ""
            return [*wrap_text_with_ansi(text, width), ""]
        if kind in ("fence", "code_block"):
            code = node.content.rstrip("\n").replace("\t", "   ")
            rows = [theme.code_block(pad_to_width(line, width)) for line in code.split("\n")]
            return [*rows, ""]
        if kind in ("bullet_list", "ordered_list"):
            return [*self._list(node, width), ""]
        if kind == "blockquote":
            border = theme.quote_border("│ ")
            inner = self._blocks(node.children, max(1, width - 2))
            while inner and inner[-1] == "":
                inner.pop()
            return [border + line for line in inner] + [""]
        if kind == "hr":
            return [theme.hr("─" * width), ""]
        if kind == "table":
            return [*self._table(node, width), ""]
        if kind == "html_block":
            text = node.content.rstrip("\n")
            return [*wrap_text_with_ansi(self._text_style(text), width), ""] if text else []
        if kind == "inline":
            return wrap_text_with_ansi(self._inline(node), width)
        return []

    def _list(self, node: SyntaxTreeNode, width: int) -> list[str]:
        ordered = node.type == "ordered_list"
        number = int(node.attrs.get("start", 1) or 1) if ordered else 0
        lines: list[str] = []
        for item in node.children:
            marker = f"{number}. " if ordered else "- "
            number += 1
            indent = " " * visible_width(marker)
            body = self._blocks(item.children, max(1, width - len(indent)))
            body = [line for line in body if line != ""] or [""]
            lines.append(self._theme.bullet(marker) + body[0])
            lines.extend(indent + line for line in body[1:])
        return lines

    def _table(self, node: SyntaxTreeNode, width: int) -> list[str]:
        rows: list[list[str]] = []
        for section in node.children:
            for tr in section.children:
                rows.append([self._inline(cell.children[0]) if cell.children else "" for cell in tr.children])
        if not rows:
            return []
        columns = max(len(r) for r in rows)
        for r in rows:
            r.extend([""] * (columns - len(r)))
        widths = [max(visible_width(r[c]) for r in rows) for c in range(columns)]
        # Shrink the widest columns until the table fits.
        budget = width - (3 * columns + 1)
        while sum(widths) > budget and max(widths) > 3:
            widths[widths.index(max(widths))] -= 1

        border = self._theme.table_border
        lines = [border("┌" + "┬".join("─" * (w + 2) for w in widths) + "┐")]
        for index, row in enumerate(rows):
            cells = [" " + pad_to_width(wrap_text_with_ansi(cell, w)[0], w) + " " for cell, w in zip(row, widths)]
            if index == 0:
                cells = [style.bold(c) for c in cells]
            lines.append(border("│") + border("│").join(cells) + border("│"))
            if index == 0:
                lines.append(border("├" + "┼".join("─" * (w + 2) for w in widths) + "┤"))
        lines.append(border("└" + "┴".join("─" * (w + 2) for w in widths) + "┘"))
        return lines

    # ------------------------------------------------------------------
    # Inline
    # ------------------------------------------------------------------

    def _inline(self, node: SyntaxTreeNode) -> str:
        return "".join(self._span(child) for child in node.children)

    def _span(self, node: SyntaxTreeNode) -> str:
        kind = node.type
        theme = self._theme
        if kind == "text":
            return self._text_style(node.content) if node.content else ""
        if kind == "softbreak":
            return " "
        if kind == "hardbreak":
            return "\n"
        if kind == "code_inline":
            return theme.code(node.content)
        if kind == "strong":
            return style.bold(self._inline(node))
        if kind == "em":
            return style.italic(self._inline(node))
        if kind == "s":
            return style.strikethrough(self._inline(node))
        if kind == "link":
            label = self._inline(node)
            href = str(node.attrs.get("href", ""))
            if href and href != self._plain(node):
                return theme.link(label) + theme.link_url(f" ({href})")
            return theme.link(label)
        if kind == "image":
            alt = self._plain(node) or "image"
            return f"[{alt}]" + theme.link_url(f" ({node.attrs.get('src', '')})")
        if kind == "html_inline":
            stripped = _TAG_RE.sub("", node.content)
            return self._text_style(stripped) if stripped else ""
        return self._inline(node) if node.children else self._text_style(node.content)

    @staticmethod
    def _plain(node: SyntaxTreeNode) -> str:
        if not node.children:
            return node.content
        return "".join(Markdown._plain(child) for child in node.children)
