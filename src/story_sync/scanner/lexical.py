"""Lexical scanning helpers for TypeScript/JavaScript component sources."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class LexicalRules:
    """Markers used while masking non-code text."""

    line_comment_prefixes: tuple[str, ...] = ("//",)
    block_comment_pairs: tuple[tuple[str, str], ...] = (("/*", "*/"),)
    string_delimiters: tuple[str, ...] = ("'", '"', "`")
    multiline_string_delimiters: tuple[str, ...] = ("`",)
    escape_char: str = "\\"


TS_RULES = LexicalRules()


def mask_comments_and_strings(
    text: str,
    rules: LexicalRules | None = None,
    keep_strings: bool = False,
) -> str:
    """Mask comments and strings while preserving line count and character offsets.

    With `keep_strings`, string contents and delimiters stay visible and only
    comments are blanked.

    Quote-delimited strings never span lines: a newline ends them. JSX text such
    as `<p>Don't</p>` therefore masks at most the rest of its own line.
    """
    active_rules = rules or TS_RULES
    line_prefixes = tuple(
        sorted(
            (prefix for prefix in active_rules.line_comment_prefixes if prefix),
            key=len,
            reverse=True,
        )
    )
    block_pairs = tuple(
        sorted(
            ((start, end) for start, end in active_rules.block_comment_pairs if start and end),
            key=lambda pair: len(pair[0]),
            reverse=True,
        )
    )
    string_delimiters = tuple(
        sorted(
            (marker for marker in active_rules.string_delimiters if marker),
            key=len,
            reverse=True,
        )
    )

    chars = list(text)
    length = len(text)
    index = 0
    state: tuple[str, str] | None = None

    while index < length:
        if state is None:
            line_marker = _match_any(text, index, line_prefixes)
            if line_marker is not None:
                for offset in range(len(line_marker)):
                    chars[index + offset] = " "
                state = ("line_comment", line_marker)
                index += len(line_marker)
                continue

            block_marker = _match_block_start(text, index, block_pairs)
            if block_marker is not None:
                start_marker, end_marker = block_marker
                for offset in range(len(start_marker)):
                    chars[index + offset] = " "
                state = ("block_comment", end_marker)
                index += len(start_marker)
                continue

            string_marker = _match_any(text, index, string_delimiters)
            if string_marker is not None:
                if not keep_strings:
                    for offset in range(len(string_marker)):
                        chars[index + offset] = " "
                state = ("string", string_marker)
                index += len(string_marker)
                continue

            index += 1
            continue

        mode, marker = state
        if mode == "line_comment":
            if text[index] == "\n":
                state = None
            else:
                chars[index] = " "
            index += 1
            continue

        if mode == "block_comment":
            if text.startswith(marker, index):
                for offset in range(len(marker)):
                    chars[index + offset] = " "
                state = None
                index += len(marker)
            else:
                if text[index] != "\n":
                    chars[index] = " "
                index += 1
            continue

        if text[index] == "\n":
            if marker not in active_rules.multiline_string_delimiters:
                state = None
            index += 1
            continue
        if text.startswith(marker, index) and not _is_escaped(
            text, index, active_rules.escape_char
        ):
            if not keep_strings:
                for offset in range(len(marker)):
                    chars[index + offset] = " "
            state = None
            index += len(marker)
            continue
        if not keep_strings:
            chars[index] = " "
        index += 1

    return "".join(chars)


def line_depths(masked_text: str) -> list[int]:
    """Return the brace depth in effect at the start of every `\\n`-separated line."""
    depths: list[int] = []
    depth = 0
    for line in masked_text.split("\n"):
        depths.append(depth)
        for char in line:
            if char == "{":
                depth += 1
            elif char == "}":
                depth = max(0, depth - 1)
    return depths


def _match_any(text: str, index: int, markers: tuple[str, ...]) -> str | None:
    for marker in markers:
        if text.startswith(marker, index):
            return marker
    return None


def _match_block_start(
    text: str,
    index: int,
    pairs: tuple[tuple[str, str], ...],
) -> tuple[str, str] | None:
    for start, end in pairs:
        if text.startswith(start, index):
            return start, end
    return None


def _is_escaped(text: str, index: int, escape_char: str) -> bool:
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == escape_char:
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 1
