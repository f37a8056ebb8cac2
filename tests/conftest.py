"""Shared test fixtures for costgate tests."""

import pytest

from costgate.config import CostgateConfig


def word_encode(text):
    """Stand-in tokenizer: one token per whitespace-separated word."""
    return text.split()


@pytest.fixture
def encode():
    return word_encode


@pytest.fixture
def config():
    """Default config, independent of any file in the user's home."""
    return CostgateConfig(encoding="cl100k_base")


@pytest.fixture
def project_tree(tmp_path):
    """A small project: 10 + 5 + 3 word source files, an image, and vendored deps.

    project/
      main.py           10 words
      logo.png          ignored extension
      pkg/util.py       5 words
      pkg/notes.md      3 words
      node_modules/x.js ignored directory
    """
    root = tmp_path / "project"
    (root / "pkg").mkdir(parents=True)
    (root / "node_modules").mkdir()
    (root / "main.py").write_text(" ".join(["word"] * 10))
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (root / "pkg" / "util.py").write_text("a b c d e")
    (root / "pkg" / "notes.md").write_text("one two three")
    (root / "node_modules" / "x.js").write_text("lots of vendored code here")
    return root
