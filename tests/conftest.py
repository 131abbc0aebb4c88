"""Root pytest configuration for all tests."""

import pytest

from builders import FakeDownloader


@pytest.fixture
def downloader():
    return FakeDownloader()
