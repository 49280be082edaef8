from __future__ import annotations

from story_sync.sync.exports import parse_named_exports
from story_sync.sync.merge import merge_examples

FRESH = """import { Button } from './Button'

export default { component: Button }

export const Default = {
  args: { children: 'Hi' },
}

export const Variants = {
  render: () => null,
}
"""

PRIOR = """import { Button } from './Button'

export default { component: Button }

export const Default = {
  args: { children: 'Old' },
}

export const Sizes = {
  render: () => null,
}

// Hand-written example
export const WithIcon = {
  args: { children: 'Icon' },
}
"""


def test_user_examples_are_appended_after_fresh_content() -> None:
    result = merge_examples(FRESH, PRIOR, ("Default", "Variants"), ("Default", "Sizes"))

    assert result.preserved == ("WithIcon",)
    assert result.removed == ("Sizes",)
    assert result.content.startswith(FRESH.rstrip("\n"))
    assert "// Hand-written example\nexport const WithIcon = {" in result.content
    assert parse_named_exports(result.content) == ["Default", "Variants", "WithIcon"]


def test_without_history_every_prior_only_name_is_preserved() -> None:
    result = merge_examples(FRESH, PRIOR, ("Default", "Variants"))

    assert result.preserved == ("Sizes", "WithIcon")
    assert result.removed == ()


def test_fresh_names_win_over_prior_definitions() -> None:
    result = merge_examples(FRESH, PRIOR, ("Default", "Variants"), ("Default", "Sizes"))

    assert "children: 'Old'" not in result.content
    assert "children: 'Hi'" in result.content


def test_nothing_to_preserve_returns_fresh_content_unchanged() -> None:
    result = merge_examples(FRESH, FRESH, ("Default", "Variants"), ("Default", "Variants"))

    assert result.content == FRESH
    assert result.preserved == ()
    assert result.removed == ()


def test_merge_is_stable_when_repeated() -> None:
    first = merge_examples(FRESH, PRIOR, ("Default", "Variants"), ("Default", "Sizes"))
    second = merge_examples(FRESH, first.content, ("Default", "Variants"), ("Default", "Variants"))

    assert second.content == first.content
    assert second.preserved == ("WithIcon",)
