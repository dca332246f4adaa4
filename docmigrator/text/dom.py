"""DOM-to-plain-text linearization.

The walk runs over a small tagged tree (``ElementNode`` / ``TextNode``) so it
does not depend on any parser API and uses an explicit stack instead of
recursion. ``from_soup`` converts a BeautifulSoup tree into that form.

The output is only ever compared against other linearizations (see
``docmigrator.text.diff``); it is never used to render a document.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

BLOCK_ELEMENTS = frozenset([
    "div", "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "table", "tr", "td", "th",
    "section", "article", "header", "footer", "nav",
    "aside", "main", "figure", "figcaption", "blockquote",
    "pre", "form", "fieldset", "legend", "dl", "dt", "dd",
    "hr", "br",
])

# No stylesheet is evaluated, so these stand in for the user agent's display:none defaults.
HIDDEN_BY_DEFAULT = frozenset(["script", "style", "template", "head", "noscript", "title", "meta", "link"])

BLOCK_DISPLAYS = ("block", "flex", "grid")


def parse_style(style: Optional[str]) -> Dict[str, str]:
    """``"display: none; Color:red"`` -> ``{"display": "none", "color": "red"}``."""
    declarations: Dict[str, str] = {}
    if not style:
        return declarations
    for chunk in style.split(";"):
        name, sep, value = chunk.partition(":")
        if not sep:
            continue
        value = value.replace("!important", "").strip().lower()
        declarations[name.strip().lower()] = value
    return declarations


@dataclass
class TextNode:
    text: str


@dataclass
class ElementNode:
    tag: str
    style: Dict[str, str] = field(default_factory=dict)
    hidden: bool = False
    children: List["Node"] = field(default_factory=list)

    @property
    def display(self) -> str:
        return self.style.get("display", "")

    @property
    def is_visible(self) -> bool:
        if self.hidden or self.tag in HIDDEN_BY_DEFAULT:
            return False
        if self.display == "none" or self.style.get("visibility") == "hidden":
            return False
        return not _is_zero(self.style.get("opacity"))

    @property
    def is_block(self) -> bool:
        display = self.display
        return (
            self.tag in BLOCK_ELEMENTS
            or display in BLOCK_DISPLAYS
            or display.startswith("table")
        )

    def text_content(self, visible_only: bool = False) -> str:
        """Concatenated text of every descendant (like ``textContent``).

        With ``visible_only`` invisible descendants and their subtrees are left out.
        """
        parts: List[str] = []
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif not visible_only or node is self or node.is_visible:
                stack.extend(reversed(node.children))
        return "".join(parts)


Node = Union[ElementNode, TextNode]


def _is_zero(value: Optional[str]) -> bool:
    if value is None:
        return False
    try:
        return float(value.rstrip("%")) == 0
    except ValueError:
        return False


def from_soup(root: Union[Tag, BeautifulSoup]) -> ElementNode:
    """Copy a BeautifulSoup subtree into ``ElementNode``/``TextNode`` form."""
    top = _element_from_tag(root)
    stack = [(root, top)]
    while stack:
        tag, node = stack.pop()
        for child in tag.children:
            if isinstance(child, Tag):
                element = _element_from_tag(child)
                node.children.append(element)
                stack.append((child, element))
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                node.children.append(TextNode(str(child)))
    return top


def _element_from_tag(tag: Union[Tag, BeautifulSoup]) -> ElementNode:
    if isinstance(tag, BeautifulSoup):
        return ElementNode(tag="#document")
    style = tag.get("style")
    if isinstance(style, list):
        style = " ".join(style)
    return ElementNode(
        tag=tag.name.lower(),
        style=parse_style(style),
        hidden=tag.has_attr("hidden"),
    )


class _TextBuffer:
    def __init__(self) -> None:
        self.parts: List[str] = []
        self.last = ""

    def __bool__(self) -> bool:
        return bool(self.parts)

    def raw(self, text: str) -> None:
        if text:
            self.parts.append(text)
            self.last = text[-1]

    def boundary(self) -> None:
        if self.parts and self.last != "\n":
            self.raw("\n")

    def text(self, text: str) -> None:
        if not text.strip():
            return
        text = re.sub(r"\s+", " ", text)
        if text.startswith(" "):
            if self.parts and self.last not in (" ", "\n"):
                self.raw(" ")
            text = text[1:]
        trailing = text.endswith(" ")
        if trailing:
            text = text[:-1]
        self.raw(text)
        if trailing and self.last not in (" ", "\n"):
            self.raw(" ")

    def getvalue(self) -> str:
        return "".join(self.parts)


_ENTER = 0
_EXIT = 1


def linearize(root: Node) -> str:
    """Plain-text rendering of ``root`` for diffing.

    Invisible subtrees are skipped, block elements sit on their own lines,
    ``<br>`` is one newline, ``<hr>`` is ``\\n---\\n`` and ``<pre>`` is verbatim.
    """
    out = _TextBuffer()
    stack = [(_ENTER, root)]
    while stack:
        action, node = stack.pop()
        if action == _EXIT:
            out.boundary()
            continue
        if isinstance(node, TextNode):
            out.text(node.text)
            continue
        if not node.is_visible:
            continue
        if node.tag == "br":
            out.raw("\n")
            continue
        if node.tag == "hr":
            out.raw("\n---\n")
            continue
        if node.tag == "pre":
            out.boundary()
            out.raw(node.text_content(visible_only=True))
            out.boundary()
            continue
        if node.is_block:
            out.boundary()
            stack.append((_EXIT, node))
        stack.extend((_ENTER, child) for child in reversed(node.children))

    text = re.sub(r"[ \t]+", " ", out.getvalue())
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def html_to_text(html: str, selector: Optional[str] = None) -> str:
    """Parse ``html`` and linearize either the whole document or the ``selector`` match."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.select_one(selector) if selector else soup
    if root is None:
        return ""
    return linearize(from_soup(root))
