# taskboard/core/security.py
"""
게시글 변경(상태 수정, 삭제)에 사용하는 단일 권한 규칙.

작성자로 기록된 사용자만 게시글을 변경할 수 있습니다. 역할 계층이나 위임은 없습니다.
"""
from typing import Any

from taskboard.core.errors import ForbiddenError
from taskboard.models.post import Post


def is_post_author(post: Post, acting_user_id: Any) -> bool:
    # 표시 이름이 아닌 정규 식별자 문자열을 그대로 비교합니다.
    if not isinstance(acting_user_id, str) or not acting_user_id:
        return False
    return acting_user_id == post.author_id


def require_post_author(post: Post, acting_user_id: Any, message: str = "Unauthorized") -> None:
    if not is_post_author(post, acting_user_id):
        raise ForbiddenError(message)
