# taskboard/api/comments/test_comment_service.py
import pytest

from taskboard.core.errors import NotFoundError, ValidationError


@pytest.fixture
def post_id(services):
    post = services['posts'].create_post("user-a", "Need a ride", "Airport to downtown", "Transport", "Springfield")
    return post['post_id']


def test_add_comment_links_post(services, db, post_id):
    comment = services['comments'].add_comment(post_id, "  I can help  ", "user-b")

    assert comment['text'] == "I can help"
    assert comment['post_id'] == post_id
    assert comment['author'] == {'user_id': 'user-b', 'nickname': 'bob', 'profile_image_url': None}
    assert db.data('posts', post_id)['comments'] == [comment['comment_id']]
    assert db.data('comments', comment['comment_id'])['author_id'] == "user-b"


@pytest.mark.parametrize("text", ["", "   ", None, 42])
def test_add_comment_requires_text(services, db, post_id, text):
    with pytest.raises(ValidationError) as exc_info:
        services['comments'].add_comment(post_id, text, "user-b")

    assert exc_info.value.message == "text is required"
    assert db.ids('comments') == set()


def test_add_comment_to_missing_post(services, db):
    with pytest.raises(NotFoundError) as exc_info:
        services['comments'].add_comment("missing", "hello", "user-b")

    assert exc_info.value.message == "Post not found"
    assert db.ids('comments') == set()


def test_get_comments_for_post(services, post_id):
    first = services['comments'].add_comment(post_id, "first", "user-b")
    second = services['comments'].add_comment(post_id, "second", "user-a")

    comments = services['comments'].get_comments_for_post(post_id)

    assert [c['comment_id'] for c in comments] == [second['comment_id'], first['comment_id']]
    assert services['comments'].get_comments_for_post("missing") == []


def test_comment_author_without_user_document(services, post_id):
    comment = services['comments'].add_comment(post_id, "hello", "ghost")
    assert comment['author'] == {'user_id': 'ghost', 'nickname': None, 'profile_image_url': None}


def test_add_comment_reads_with_timeout(app, services, db, post_id):
    db.read_options.clear()

    services['comments'].add_comment(post_id, "hello", "user-b")

    assert db.read_options
    assert all(options.get('timeout') == app.config['FIRESTORE_TIMEOUT_SECONDS'] for options in db.read_options)
