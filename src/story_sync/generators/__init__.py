"""Artifact generators package."""

from .base import ArtifactGenerator, ArtifactKind, GeneratedArtifact, write_artifact
from .docs import DocsGenerator
from .registry import Generators
from .stories import StoryGenerator
from .testing import TestGenerator

__all__ = [
    "ArtifactGenerator",
    "ArtifactKind",
    "DocsGenerator",
    "GeneratedArtifact",
    "Generators",
    "StoryGenerator",
    "TestGenerator",
    "write_artifact",
]
