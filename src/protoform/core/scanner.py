"""
Lexical helpers for IDL text.

The IDL is never tokenized as a whole. Instead every helper here works on raw
text with a character classifier that knows where string literals, ``//``
line comments and ``/* */`` block comments start and end, so that a brace,
semicolon or comment marker inside a quoted option value never changes the
structure of the file.

Entry points:
    ``strip_block_comments(text)``
    ``extract_blocks(text, kind) -> list[Block]``
    ``remove_inner_blocks(body)``
    ``split_line_comment(line) -> (code, comment)``
    ``split_statements(code) -> (complete, rest)``
    ``extract_options_segment(statement)``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum


class CharState(IntEnum):
    """Lexical class of a single character."""

    CODE = 0
    STRING = 1
    LINE_COMMENT = 2
    BLOCK_COMMENT = 3


@dataclass(frozen=True)
class Block:
    """A ``message``/``enum`` block: its name and the text between its braces."""

    name: str
    body: str
    start: int = 0


def char_states(text: str) -> list[CharState]:
    """Classify every character of ``text``.

    String literals use ``"`` or ``'`` with backslash escapes and end at the
    closing quote or at the end of the line. Newlines that end a line comment
    are classified as code.
    """
    states: list[CharState] = []
    state = CharState.CODE
    quote = ""
    i = 0
    n = len(text)

    while i < n:
        c = text[i]

        if state == CharState.CODE:
            if c == "/" and text.startswith("//", i):
                states.extend((CharState.LINE_COMMENT, CharState.LINE_COMMENT))
                state = CharState.LINE_COMMENT
                i += 2
                continue
            if c == "/" and text.startswith("/*", i):
                states.extend((CharState.BLOCK_COMMENT, CharState.BLOCK_COMMENT))
                state = CharState.BLOCK_COMMENT
                i += 2
                continue
            if c in ('"', "'"):
                states.append(CharState.STRING)
                state = CharState.STRING
                quote = c
                i += 1
                continue
            states.append(CharState.CODE)
            i += 1
            continue

        if state == CharState.STRING:
            if c == "\n":
                # Unterminated literal; strings never span lines
                states.append(CharState.CODE)
                state = CharState.CODE
                i += 1
                continue
            states.append(CharState.STRING)
            if c == "\\" and i + 1 < n and text[i + 1] != "\n":
                states.append(CharState.STRING)
                i += 2
                continue
            if c == quote:
                state = CharState.CODE
            i += 1
            continue

        if state == CharState.LINE_COMMENT:
            if c == "\n":
                states.append(CharState.CODE)
                state = CharState.CODE
            else:
                states.append(CharState.LINE_COMMENT)
            i += 1
            continue

        # Block comment
        if c == "*" and text.startswith("*/", i):
            states.extend((CharState.BLOCK_COMMENT, CharState.BLOCK_COMMENT))
            state = CharState.CODE
            i += 2
            continue
        states.append(CharState.BLOCK_COMMENT)
        i += 1

    return states


def strip_block_comments(text: str) -> str:
    """Remove ``/* ... */`` comments, keeping their newlines so line structure survives.

    An unterminated block comment swallows the rest of the text.
    """
    states = char_states(text)
    return "".join(
        c
        for c, state in zip(text, states)
        if state != CharState.BLOCK_COMMENT or c == "\n"
    )


def find_matching_brace(
    text: str,
    open_pos: int,
    states: list[CharState] | None = None,
) -> int:
    """Index of the ``}`` closing the ``{`` at ``open_pos``, or -1 if it is never closed."""
    if states is None:
        states = char_states(text)
    depth = 0
    for i in range(open_pos, len(text)):
        if states[i] != CharState.CODE:
            continue
        c = text[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def extract_blocks(text: str, kind: str) -> list[Block]:
    """
    Find every ``<kind> Name { ... }`` block, nested ones included.

    Blocks are returned in source order of their headers. A block whose
    opening brace is never closed is skipped and scanning continues after
    its header, so malformed trailing content does not hide earlier blocks.

    Args:
        text: IDL source (block comments already stripped)
        kind: ``"message"`` or ``"enum"``

    Returns:
        Blocks with the raw text between the braces as ``body``.
    """
    header = re.compile(rf"\b{re.escape(kind)}\s+([A-Za-z_]\w*)\s*\{{")
    states = char_states(text)
    blocks: list[Block] = []
    pos = 0

    while True:
        m = header.search(text, pos)
        if m is None:
            break
        pos = m.end()
        if states[m.start()] != CharState.CODE:
            continue
        open_brace = m.end() - 1
        close_brace = find_matching_brace(text, open_brace, states)
        if close_brace < 0:
            continue
        blocks.append(Block(name=m.group(1), body=text[open_brace + 1 : close_brace], start=m.start()))

    return blocks


def remove_inner_blocks(body: str) -> str:
    """
    Drop every nested ``{ ... }`` from a block body.

    Braces inside string literals and ``//`` comments are ignored. Each
    removed block is replaced by a ``;`` so its header (``message Inner``,
    ``oneof choice``...) ends up as a statement of its own instead of being
    glued onto the next field declaration.
    """
    states = char_states(body)
    out: list[str] = []
    depth = 0

    for c, state in zip(body, states):
        if state == CharState.CODE and c == "{":
            depth += 1
            continue
        if state == CharState.CODE and c == "}":
            if depth > 0:
                depth -= 1
                if depth == 0:
                    out.append(";")
            continue
        if depth == 0:
            out.append(c)

    return "".join(out)


def split_line_comment(line: str) -> tuple[str, str]:
    """
    Split one line into its code part and its ``//`` comment text.

    Both parts are stripped; the comment excludes the ``//`` marker.
    """
    states = char_states(line)
    for i, state in enumerate(states):
        if state == CharState.LINE_COMMENT:
            return line[:i].strip(), line[i + 2 :].strip()
    return line.strip(), ""


def split_statements(code: str) -> tuple[list[str], str]:
    """
    Cut code at every ``;`` outside string literals.

    Returns:
        ``(complete, rest)``: the ``;``-terminated statements in order, and
        whatever follows the last terminator.
    """
    states = char_states(code)
    complete: list[str] = []
    start = 0
    for i, (c, state) in enumerate(zip(code, states)):
        if c == ";" and state == CharState.CODE:
            statement = code[start : i + 1].strip()
            if statement != ";":
                complete.append(statement)
            start = i + 1
    return complete, code[start:].strip()


def extract_options_segment(statement: str) -> str:
    """
    Text between the first ``[`` and the last ``]`` before the final ``;``.

    Returns an empty string when the statement carries no option list.
    """
    semi = statement.rfind(";")
    end = semi if semi >= 0 else len(statement)
    open_bracket = statement.find("[")
    if open_bracket < 0:
        return ""
    close_bracket = statement.rfind("]", 0, end)
    if close_bracket <= open_bracket:
        return ""
    return statement[open_bracket + 1 : close_bracket]
