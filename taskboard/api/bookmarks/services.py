# taskboard/api/bookmarks/services.py
import logging
from enum import Enum
from typing import Optional, List

from firebase_admin import firestore

from taskboard.core.errors import NotFoundError


class BookmarkResult(Enum):
    SAVED = "saved"
    UNSAVED = "unsaved"

    @property
    def message(self) -> str:
        return "Post bookmarked" if self is BookmarkResult.SAVED else "Post removed from bookmark"


class BookmarkService:
    """
    사용자의 북마크 목록(users.bookmarks)을 토글합니다.
    목록은 순서가 있는 배열로 저장되지만 ArrayUnion/ArrayRemove만 사용하여 중복 없는 집합으로 유지합니다.
    """
    def __init__(self, db=None, timeout: Optional[float] = None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.timeout = timeout

    def _toggle_in_transaction(self, transaction, user_id: str, post_id: str) -> BookmarkResult:
        """
        트랜잭션 내에서 북마크 상태를 토글합니다.
        두 요청이 같은 상태를 읽고 동시에 추가하더라도 ArrayUnion이므로 참조는 하나만 남습니다.
        """
        post_snapshot = self.posts_ref.document(post_id).get(transaction=transaction, timeout=self.timeout)
        if not post_snapshot.exists:
            raise NotFoundError("Post not found")

        user_ref = self.users_ref.document(user_id)
        user_snapshot = user_ref.get(transaction=transaction, timeout=self.timeout)
        bookmarks = (user_snapshot.to_dict() or {}).get('bookmarks', []) if user_snapshot.exists else []

        if post_id in bookmarks:
            transaction.set(user_ref, {'bookmarks': firestore.ArrayRemove([post_id])}, merge=True)
            return BookmarkResult.UNSAVED

        transaction.set(user_ref, {'bookmarks': firestore.ArrayUnion([post_id])}, merge=True)
        return BookmarkResult.SAVED

    def toggle(self, user_id: str, post_id: str) -> BookmarkResult:
        """게시글 북마크를 추가하거나 제거합니다."""
        transaction = self.db.transaction()
        result = firestore.transactional(self._toggle_in_transaction)(transaction, user_id, post_id)
        logging.info(f"북마크 {result.value} (user_id: {user_id}, post_id: {post_id})")
        return result

    def get_bookmarked_post_ids(self, user_id: str) -> List[str]:
        """사용자의 북마크 순서대로 게시글 ID 목록을 반환합니다."""
        doc = self.users_ref.document(user_id).get(timeout=self.timeout)
        if not doc.exists:
            return []
        return list(dict.fromkeys((doc.to_dict() or {}).get('bookmarks') or []))

# 서비스 인스턴스는 taskboard/__init__.py에서 생성 및 주입됩니다.
bookmark_service: Optional[BookmarkService] = None
