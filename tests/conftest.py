from __future__ import annotations

import pytest

from deckforge.engine.types import CardPool
from deckforge.paths import get_paths
from deckforge.services.content import ContentService


@pytest.fixture(scope="session")
def content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


@pytest.fixture(scope="session")
def card_pool(content: ContentService) -> CardPool:
    return content.load_card_pool()
