import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    """Mock unit of work: commit/rollback are awaited, never hit a database"""
    uow = MagicMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def mock_event_publisher():
    """Collects published events in publisher.events"""
    publisher = MagicMock()
    publisher.events = []
    publisher.publish = MagicMock(side_effect=publisher.events.append)
    return publisher
