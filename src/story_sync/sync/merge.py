"""Reconcile regenerated example content with user additions."""

from __future__ import annotations

from collections.abc import Iterable

from story_sync.sync.exports import extract_export_block, parse_named_exports
from story_sync.sync.models import MergeResult


def merge_examples(
    fresh: str,
    prior: str,
    fresh_names: Iterable[str],
    generated_before: Iterable[str] = (),
) -> MergeResult:
    """Append examples that exist only in `prior` to freshly generated content.

    `generated_before` lists the names the generator emitted last time. Those
    names are never treated as user additions; when they vanish from the fresh
    output they are reported as removed. Without that history every
    prior-only name is preserved.
    """
    prior_names = parse_named_exports(prior)
    emitted = set(fresh_names) | set(parse_named_exports(fresh))
    history = set(generated_before)

    preserved: list[str] = []
    blocks: list[str] = []
    for name in prior_names:
        if name in emitted or name in history:
            continue
        block = extract_export_block(prior, name)
        if block is None:
            continue
        preserved.append(name)
        blocks.append(block)

    removed = tuple(name for name in prior_names if name in history and name not in emitted)

    if not blocks:
        return MergeResult(content=fresh, preserved=(), removed=removed)

    content = fresh.rstrip("\n") + "\n"
    for block in blocks:
        content += "\n" + block + "\n"
    return MergeResult(content=content, preserved=tuple(preserved), removed=removed)
