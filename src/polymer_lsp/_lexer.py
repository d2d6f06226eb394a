"""Tolerant HTML tokenizer.

The tokenizer never fails: unterminated tags, unterminated quotes and
mismatched closing tags all produce tokens. Tokens are contiguous, so every
offset of the text belongs to exactly one token or sits on a boundary between
two of them.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

_re_tag_open = re.compile(r"<(/?)([A-Za-z][\w:.-]*)")
_re_binding = re.compile(r"(\{\{|\[\[)(.*?)(\}\}|\]\])", re.DOTALL)

RAW_TEXT_TAGS = frozenset({"script", "style"})
_ATTR_NAME_STOP = frozenset("=<>")


@dataclass
class Attr:
    name: str
    name_start: int
    name_end: int
    eq: int | None = None
    value: str | None = None
    value_start: int | None = None
    value_end: int | None = None
    quote: str | None = None


@dataclass
class StartTag:
    name: str
    start: int
    name_end: int
    end: int
    attrs: list[Attr] = field(default_factory=list)
    closed: bool = False
    self_closing: bool = False

    def contains(self, offset: int) -> bool:
        if self.closed:
            return self.start < offset < self.end
        return self.start < offset <= self.end

    def get_attr(self, name: str) -> Attr | None:
        for attr in self.attrs:
            if attr.name.lower() == name:
                return attr
        return None

    def get_attr_value(self, name: str) -> str | None:
        attr = self.get_attr(name)
        return attr.value if attr else None


@dataclass
class EndTag:
    name: str
    start: int
    end: int


@dataclass
class Text:
    start: int
    end: int


@dataclass
class RawText:
    tag: str
    start: int
    end: int


@dataclass
class Comment:
    start: int
    end: int


Token = StartTag | EndTag | Text | RawText | Comment


@dataclass
class Binding:
    """A ``{{...}}`` or ``[[...]]`` expression."""

    style: str
    start: int
    end: int
    expression_start: int
    expression_end: int


def tokenize(text: str) -> Iterator[Token]:
    """Split ``text`` into contiguous tokens."""
    n = len(text)
    i = 0
    while i < n:
        lt = text.find("<", i)
        if lt == -1:
            yield Text(i, n)
            return
        if lt > i:
            yield Text(i, lt)

        if text.startswith("<!--", lt):
            close = text.find("-->", lt + 4)
            i = n if close == -1 else close + 3
            yield Comment(lt, i)
            continue
        if text.startswith("<!", lt) or text.startswith("<?", lt):
            i = _find_tag_close(text, lt + 2)
            yield Comment(lt, i)
            continue

        match = _re_tag_open.match(text, lt)
        if match is None:
            if text.startswith("</", lt):
                i = _find_tag_close(text, lt + 2)
                yield EndTag("", lt, i)
            else:
                # A bare '<' while a new tag is being typed
                i = lt + 1
                yield StartTag(name="", start=lt, name_end=i, end=i)
            continue

        if match.group(1):
            i = _find_tag_close(text, match.end())
            yield EndTag(match.group(2), lt, i)
            continue

        tag = _scan_start_tag(text, lt, match)
        yield tag
        i = tag.end

        raw_tag = tag.name.lower()
        if tag.closed and not tag.self_closing and raw_tag in RAW_TEXT_TAGS:
            close = _find_raw_text_end(text, tag.end, raw_tag)
            yield RawText(raw_tag, tag.end, close)
            i = close


def start_tags(text: str) -> Iterator[StartTag]:
    """Yield every named start tag of ``text`` in document order."""
    for token in tokenize(text):
        if isinstance(token, StartTag) and token.name:
            yield token


def iter_bindings(text: str, start: int = 0, end: int | None = None) -> Iterator[Binding]:
    """Yield the closed binding expressions between ``start`` and ``end``."""
    end = len(text) if end is None else end
    for match in _re_binding.finditer(text, start, end):
        opener, closer = match.group(1), match.group(3)
        if (opener == "{{") != (closer == "}}"):
            continue
        yield Binding(
            style="two-way" if opener == "{{" else "one-way",
            start=match.start(),
            end=match.end(),
            expression_start=match.start(2),
            expression_end=match.end(2),
        )


def open_binding(text: str, start: int, offset: int) -> tuple[str, int] | None:
    """Find a binding opened between ``start`` and ``offset`` and not closed before ``offset``.

    Returns:
        Tuple of (binding style, offset of the first expression character), or None
    """
    if offset < start:
        return None
    segment = text[start:offset]
    two_way = segment.rfind("{{")
    one_way = segment.rfind("[[")
    if two_way == one_way == -1:
        return None
    if two_way > one_way:
        pos, style, closer = two_way, "two-way", "}}"
    else:
        pos, style, closer = one_way, "one-way", "]]"
    if closer in segment[pos + 2 :]:
        return None
    return style, start + pos + 2


def _find_tag_close(text: str, pos: int) -> int:
    """Return the offset after the '>' closing a tag, stopping early at a new '<'."""
    n = len(text)
    while pos < n:
        c = text[pos]
        if c == ">":
            return pos + 1
        if c == "<":
            return pos
        pos += 1
    return n


def _find_raw_text_end(text: str, pos: int, tag: str) -> int:
    close = text.lower().find(f"</{tag}", pos)
    return len(text) if close == -1 else close


def _skip_whitespace(text: str, pos: int) -> int:
    n = len(text)
    while pos < n and text[pos].isspace():
        pos += 1
    return pos


def _scan_start_tag(text: str, start: int, match: re.Match[str]) -> StartTag:
    tag = StartTag(name=match.group(2), start=start, name_end=match.end(), end=match.end())
    n = len(text)
    j = match.end()
    while True:
        j = _skip_whitespace(text, j)
        if j >= n:
            break
        c = text[j]
        if c == ">":
            tag.closed = True
            j += 1
            break
        if c == "<":
            break
        if c == "/":
            if text.startswith("/>", j):
                tag.closed = tag.self_closing = True
                j += 2
                break
            j += 1
            continue

        name_start = j
        while (
            j < n
            and not text[j].isspace()
            and text[j] not in _ATTR_NAME_STOP
            and not text.startswith("/>", j)
        ):
            j += 1
        if j == name_start:
            # stray '='
            j += 1
            continue
        attr = Attr(name=text[name_start:j], name_start=name_start, name_end=j)

        k = _skip_whitespace(text, j)
        if k < n and text[k] == "=":
            attr.eq = k
            k = _skip_whitespace(text, k + 1)
            if k < n and text[k] in "\"'":
                attr.quote = text[k]
                attr.value_start = k + 1
                close = text.find(attr.quote, k + 1)
                attr.value_end = n if close == -1 else close
                k = n if close == -1 else close + 1
            else:
                attr.value_start = k
                while k < n and not text[k].isspace() and text[k] not in "<>":
                    k += 1
                attr.value_end = k
            attr.value = text[attr.value_start : attr.value_end]
            j = k
        tag.attrs.append(attr)

    tag.end = j
    return tag
