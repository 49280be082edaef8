"""Named top-level export detection for example (story) files.

Contract: input is the text of one example file, output is the ordered list of
names declared by top-level `export const|let|var NAME` or
`export [async] function NAME` statements. Comments, strings and nested
scopes are ignored. `export default` and re-export lists are not examples.
"""

from __future__ import annotations

import re

from story_sync.scanner.lexical import line_depths, mask_comments_and_strings

_EXPORT_DECLARATION_RE = re.compile(
    r"^\s*export\s+(?:(?:const|let|var)\s+|(?:async\s+)?function\s*\*?\s*)"
    r"([A-Za-z_$][A-Za-z0-9_$]*)\b"
)
_CONTINUATION_SUFFIXES = ("=", ",", "(", "=>", "?", ":", "&&", "||", "+", ".")
_OPENERS = {"{": "}", "(": ")", "[": "]"}
_CLOSERS = {"}", ")", "]"}


def parse_named_exports(text: str) -> list[str]:
    """Return top-level named export names in declaration order, without duplicates."""
    masked = mask_comments_and_strings(text)
    depths = line_depths(masked)
    names: list[str] = []
    for index, line in enumerate(masked.split("\n")):
        if depths[index] != 0:
            continue
        match = _EXPORT_DECLARATION_RE.match(line)
        if match is None:
            continue
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def extract_export_block(text: str, name: str) -> str | None:
    """Return the full source of export `name`, including its leading comment.

    Follow-up top-level statements that assign to the export (for example
    `Name.args = {...}`) are part of the block.
    """
    masked = mask_comments_and_strings(text)
    masked_lines = masked.split("\n")
    lines = text.split("\n")
    depths = line_depths(masked)

    start = _find_declaration(masked_lines, depths, name)
    if start is None:
        return None
    end = _statement_end(masked_lines, start)

    follow = end + 1
    while follow < len(lines) and depths[follow] == 0:
        stripped = masked_lines[follow].strip()
        if not stripped:
            follow += 1
            continue
        if not stripped.startswith(f"{name}."):
            break
        end = _statement_end(masked_lines, follow)
        follow = end + 1

    first = _leading_comment_start(lines, start)
    return "\n".join(lines[first : end + 1]).rstrip()


def _find_declaration(masked_lines: list[str], depths: list[int], name: str) -> int | None:
    for index, line in enumerate(masked_lines):
        if depths[index] != 0:
            continue
        match = _EXPORT_DECLARATION_RE.match(line)
        if match is not None and match.group(1) == name:
            return index
    return None


def _statement_end(masked_lines: list[str], start: int) -> int:
    stack: list[str] = []
    for index in range(start, len(masked_lines)):
        line = masked_lines[index]
        for char in line:
            if char in _OPENERS:
                stack.append(_OPENERS[char])
            elif char in _CLOSERS and stack and stack[-1] == char:
                stack.pop()
        if stack:
            continue
        stripped = line.rstrip()
        if stripped and stripped.endswith(_CONTINUATION_SUFFIXES):
            continue
        if not stripped and index == start:
            continue
        return index
    return len(masked_lines) - 1


def _leading_comment_start(lines: list[str], start: int) -> int:
    first = start
    cursor = start - 1
    while cursor >= 0:
        stripped = lines[cursor].strip()
        if stripped.startswith("//"):
            first = cursor
            cursor -= 1
            continue
        if stripped.endswith("*/"):
            opening = cursor
            while opening >= 0 and "/*" not in lines[opening]:
                opening -= 1
            if opening < 0:
                break
            first = opening
            cursor = opening - 1
            continue
        break
    return first
