"""
Statement assembly and declaration parsing for protoform IDL.

A message or enum body is read line by line. Code is accumulated until a
``;`` completes a statement; comments are routed by position:

- a comment-only line seen before any code of the next statement is
  *leading* (pending) metadata for that statement
- a ``//`` comment on a code line, or a comment-only line in the middle of
  a multi-line statement, is *trailing* metadata for the statement

Statements that do not match the field (or enum member) grammar are dropped
together with their metadata. Nothing here raises on malformed input.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from protoform.core.annotations import (
    merge_field_meta,
    parse_enum_value_comment,
    parse_enum_value_options,
    parse_field_comment,
    parse_field_options,
)
from protoform.core.ir import (
    EnumDef,
    EnumOption,
    EnumValueMeta,
    FieldMeta,
    IdlDocument,
    MessageDef,
    ParsedField,
)
from protoform.core.scanner import (
    extract_blocks,
    extract_options_segment,
    remove_inner_blocks,
    split_line_comment,
    split_statements,
    strip_block_comments,
)
from protoform.core.strings import humanize_enum_key

logger = logging.getLogger(__name__)

FIELD_PATTERN = re.compile(
    r"^(repeated\s+)?([A-Za-z_][\w.]*)\s+([A-Za-z_]\w*)\s*=\s*\d+\s*(?:\[.*\])?\s*;$"
)
ENUM_VALUE_PATTERN = re.compile(r"^([A-Z][A-Z0-9_]*)\s*=\s*\d+\s*(?:\[.*\])?\s*;$")
FILE_OPTION_PATTERN = re.compile(
    r'^option\s+\(?([A-Za-z_][\w.]*)\)?\s*=\s*"((?:\\.|[^"\\])*)"\s*;'
)

# Statements that are recognized and discarded without being parsed
_DISCARDED_PREFIXES = ("reserved ", "oneof ")


@dataclass(frozen=True)
class Statement:
    """
    One ``;``-terminated declaration with the comments that belong to it.

    Attributes:
        text: Declaration code, lines joined by single spaces
        leading: Comment-only lines directly above the declaration
        trailing: Comments on the declaration's own lines
    """

    text: str
    leading: tuple[str, ...] = ()
    trailing: tuple[str, ...] = ()


def assemble_statements(body: str) -> Iterator[Statement]:
    """
    Yield the declarations of a block body, nested blocks removed.

    ``reserved`` and ``oneof`` statements are consumed here together with
    their pending comments.
    """
    pending: list[str] = []
    trailing: list[str] = []
    buffer = ""

    for raw_line in remove_inner_blocks(body).split("\n"):
        code, comment = split_line_comment(raw_line)

        if not code:
            if comment:
                (trailing if buffer else pending).append(comment)
            continue

        buffer = f"{buffer} {code}" if buffer else code
        complete, buffer = split_statements(buffer)
        # A line comment belongs to the statement the line ends in
        comment_index = None if buffer else len(complete) - 1

        for index, text in enumerate(complete):
            own_trailing = list(trailing)
            if comment and index == comment_index:
                own_trailing.append(comment)
            leading = tuple(pending)
            pending = []
            trailing = []

            if text.startswith(_DISCARDED_PREFIXES):
                logger.debug("Skipping statement: %s", text)
                continue
            yield Statement(text=text, leading=leading, trailing=tuple(own_trailing))

        if buffer and comment:
            trailing.append(comment)

    if buffer:
        logger.debug("Dropping unterminated statement: %s", buffer)


def _comment_meta(comments: tuple[str, ...]) -> FieldMeta:
    meta = FieldMeta()
    for comment in comments:
        meta = meta.merged(parse_field_comment(comment))
    return meta


def parse_field_statement(statement: Statement) -> ParsedField | None:
    """
    Parse one field declaration.

    Returns:
        The field with its merged metadata, or ``None`` when the statement
        is not a field declaration.
    """
    m = FIELD_PATTERN.match(statement.text)
    if m is None:
        logger.debug("Dropping unparsable statement: %s", statement.text)
        return None

    meta = merge_field_meta(
        _comment_meta(statement.leading),
        _comment_meta(statement.trailing),
        parse_field_options(extract_options_segment(statement.text)),
    )
    return ParsedField(
        name=m.group(3),
        type=m.group(2).split(".")[-1],
        repeated=bool(m.group(1)),
        **meta.model_dump(exclude_none=True),
    )


def parse_enum_value_statement(statement: Statement) -> EnumOption | None:
    """
    Parse one enum member.

    The label defaults to the humanized member name and the value to the
    member name itself.
    """
    m = ENUM_VALUE_PATTERN.match(statement.text)
    if m is None:
        logger.debug("Dropping unparsable enum member: %s", statement.text)
        return None

    key = m.group(1)
    meta = EnumValueMeta()
    for comment in (*statement.leading, *statement.trailing):
        meta = meta.merged(parse_enum_value_comment(comment))
    meta = meta.merged(parse_enum_value_options(extract_options_segment(statement.text)))

    return EnumOption(
        label=meta.label if meta.label is not None else humanize_enum_key(key),
        value=meta.value if meta.value is not None else key,
    )


def parse_messages(text: str) -> dict[str, MessageDef]:
    """Parse every message block, nested ones flattened by name."""
    messages: dict[str, MessageDef] = {}
    for block in extract_blocks(text, "message"):
        fields = [
            field
            for field in (parse_field_statement(s) for s in assemble_statements(block.body))
            if field is not None
        ]
        messages[block.name] = MessageDef(name=block.name, fields=fields)
    return messages


def parse_enums(text: str) -> dict[str, EnumDef]:
    """Parse every enum block, including enums nested in messages."""
    enums: dict[str, EnumDef] = {}
    for block in extract_blocks(text, "enum"):
        values = [
            value
            for value in (parse_enum_value_statement(s) for s in assemble_statements(block.body))
            if value is not None
        ]
        enums[block.name] = EnumDef(name=block.name, values=values)
    return enums


def extract_file_options(text: str) -> dict[str, str]:
    """
    Collect top-level ``option name = "value";`` declarations.

    Package-qualified names keep only their last segment, so
    ``option (common.app_name) = "Invoices";`` yields ``{"app_name": "Invoices"}``.
    """
    options: dict[str, str] = {}
    top_level = remove_inner_blocks(strip_block_comments(text))
    for raw_line in top_level.split("\n"):
        code, _ = split_line_comment(raw_line)
        m = FILE_OPTION_PATTERN.match(code)
        if m:
            key = m.group(1).split(".")[-1]
            options[key] = m.group(2).replace('\\"', '"').replace("\\\\", "\\")
    return options


def parse_idl(text: str) -> IdlDocument:
    """
    Parse IDL source into messages, enums and file options.

    Block comments are stripped once for the whole file before any block
    is extracted.
    """
    cleaned = strip_block_comments(text)
    return IdlDocument(
        messages=parse_messages(cleaned),
        enums=parse_enums(cleaned),
        options=extract_file_options(cleaned),
    )
