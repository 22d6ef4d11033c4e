from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mdxbundler.logging import ROOT_LOGGER
from tests._fixtures.project_builder import ProjectBuilder

# Smallest valid PNG (1x1, transparent).
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63000100000500010d0a2db40000000049454e44ae426082"
)


@pytest.fixture
def project(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = True
    root.setLevel(logging.NOTSET)
