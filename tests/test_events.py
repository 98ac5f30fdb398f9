import pytest

from filmrate.errors import NotFoundError
from filmrate.models.entities import EventType, Operation

from conftest import make_user


def test_feed_is_ordered_by_timestamp(services) -> None:
    user = make_user(services, "writer")
    services.events.append(user.id, 3_000, EventType.LIKE, Operation.ADD, 7)
    services.events.append(user.id, 1_000, EventType.REVIEW, Operation.UPDATE, 2)
    services.events.append(user.id, 2_000, EventType.FRIEND, Operation.REMOVE, 5)

    feed = services.events.feed(user.id)

    assert [e.timestamp for e in feed] == [1_000, 2_000, 3_000]
    assert feed[0].event_type is EventType.REVIEW
    assert feed[0].operation is Operation.UPDATE


def test_failed_append_is_dropped(services, caplog) -> None:
    assert services.events.append(999, None, EventType.LIKE, Operation.ADD, 1) is None
    assert "Dropped" in caplog.text


def test_feed_for_unknown_user(services) -> None:
    with pytest.raises(NotFoundError):
        services.events.feed(999)
