# taskboard/api/bookmarks/test_bookmark_service.py
import pytest

from taskboard.api.bookmarks.services import BookmarkResult
from taskboard.core.errors import NotFoundError


@pytest.fixture
def bookmark_service(services):
    return services['bookmarks']


@pytest.fixture
def post_id(services):
    post = services['posts'].create_post("user-a", "Drill", "Cordless", "Rental", "Shelbyville")
    return post['post_id']


def test_toggle_adds_then_removes(bookmark_service, db, post_id):
    result = bookmark_service.toggle("user-b", post_id)
    assert result is BookmarkResult.SAVED
    assert result.message == "Post bookmarked"
    assert db.data('users', 'user-b')['bookmarks'] == [post_id]

    result = bookmark_service.toggle("user-b", post_id)
    assert result is BookmarkResult.UNSAVED
    assert result.message == "Post removed from bookmark"
    assert db.data('users', 'user-b')['bookmarks'] == []


def test_toggle_creates_missing_user_document(bookmark_service, db, post_id):
    assert bookmark_service.toggle("newcomer", post_id) is BookmarkResult.SAVED
    assert db.data('users', 'newcomer') == {'bookmarks': [post_id]}


def test_toggle_missing_post(bookmark_service, db):
    with pytest.raises(NotFoundError):
        bookmark_service.toggle("user-b", "missing")
    assert db.data('users', 'user-b')['bookmarks'] == []


def test_concurrent_adds_keep_single_reference(bookmark_service, db, post_id):
    """두 요청이 같은 상태(북마크 없음)를 읽고 동시에 커밋하는 경우"""
    first, second = db.transaction(), db.transaction()

    assert bookmark_service._toggle_in_transaction(first, "user-b", post_id) is BookmarkResult.SAVED
    assert bookmark_service._toggle_in_transaction(second, "user-b", post_id) is BookmarkResult.SAVED
    first.commit()
    second.commit()

    assert db.data('users', 'user-b')['bookmarks'] == [post_id]


def test_get_bookmarked_post_ids(bookmark_service, services, post_id):
    other = services['posts'].create_post("user-b", "Ride", "Airport", "Transport", "Springfield")['post_id']
    bookmark_service.toggle("user-a", other)
    bookmark_service.toggle("user-a", post_id)

    assert bookmark_service.get_bookmarked_post_ids("user-a") == [other, post_id]
    assert bookmark_service.get_bookmarked_post_ids("nobody") == []


def test_toggle_reads_with_timeout(app, bookmark_service, db, post_id):
    db.read_options.clear()

    bookmark_service.toggle("user-b", post_id)

    assert len(db.read_options) == 2
    assert all(options.get('timeout') == app.config['FIRESTORE_TIMEOUT_SECONDS'] for options in db.read_options)
