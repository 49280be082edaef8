"""Bundle of the three artifact generators used by a sync pass."""

from __future__ import annotations

from dataclasses import dataclass, field

from story_sync.generators.base import ArtifactGenerator
from story_sync.generators.docs import DocsGenerator
from story_sync.generators.stories import StoryGenerator
from story_sync.generators.testing import TestGenerator


@dataclass(slots=True, frozen=True)
class Generators:
    """Story, test and docs generators, substitutable as a unit."""

    story: ArtifactGenerator = field(default_factory=StoryGenerator)
    test: ArtifactGenerator = field(default_factory=TestGenerator)
    docs: ArtifactGenerator = field(default_factory=DocsGenerator)

