# taskboard/api/posts/repository.py
import logging
import uuid
from typing import Optional, List, Dict, Any

from firebase_admin import firestore
from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from taskboard.core.errors import NotFoundError
from taskboard.models.post import Post, PostQuery, PostStatus
from taskboard.utils.datetime_utils import DateTimeUtils

# Firestore 배치 하나에 담을 수 있는 최대 쓰기 수
MAX_BATCH_WRITES = 500


class PostRepository:
    """
    'posts' 컬렉션에 대한 저장/조회 로직을 담당합니다.
    작성자의 posts 역참조 목록과 종속 댓글의 정합성도 이 계층에서 유지합니다.
    """
    def __init__(self, db=None, timeout: Optional[float] = None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')
        self.comments_ref = self.db.collection('comments')
        self.users_ref = self.db.collection('users')
        self.timeout = timeout

    # --- 생성 ---
    def create(self, title: str, description: str, category: str, location: str,
               author_id: str, image: Optional[Dict[str, str]] = None) -> Post:
        """
        게시글을 저장하고 작성자의 posts 목록에 ID를 추가합니다.
        두 쓰기는 하나의 배치로 커밋되어 함께 성공하거나 함께 실패합니다.
        """
        post_category = Post.validate_fields(title, description, category, location)
        new_post = Post(
            post_id=str(uuid.uuid4()),
            author_id=author_id,
            title=title.strip(),
            description=description.strip(),
            category=post_category,
            location=location.strip(),
            image=image.get('url') if image else None,
            image_path=image.get('path') if image else None,
        )

        batch = self.db.batch()
        batch.set(self.posts_ref.document(new_post.post_id), new_post.to_dict())
        batch.set(self.users_ref.document(author_id), {'posts': firestore.ArrayUnion([new_post.post_id])}, merge=True)
        batch.commit(timeout=self.timeout)

        logging.info(f"게시글 생성 완료 (post_id: {new_post.post_id}, author_id: {author_id})")
        return new_post

    # --- 조회 ---
    def get(self, post_id: str) -> Optional[Post]:
        if not post_id:
            return None
        doc = self.posts_ref.document(post_id).get(timeout=self.timeout)
        if not doc.exists:
            return None
        return Post.from_dict(doc.to_dict())

    def get_or_404(self, post_id: str) -> Post:
        post = self.get(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def get_many(self, post_ids: List[str]) -> Dict[str, Post]:
        """여러 게시글을 한 번에 조회합니다. 존재하지 않는 ID는 결과에서 빠집니다."""
        unique_ids = [pid for pid in dict.fromkeys(post_ids) if pid]
        if not unique_ids:
            return {}
        refs = [self.posts_ref.document(pid) for pid in unique_ids]
        return {
            snapshot.id: Post.from_dict(snapshot.to_dict())
            for snapshot in self.db.get_all(refs, timeout=self.timeout)
            if snapshot.exists
        }

    def _stream(self, query) -> List[Post]:
        ordered = query.order_by('created_at', direction=firestore.Query.DESCENDING)
        return [Post.from_dict(doc.to_dict()) for doc in ordered.stream(timeout=self.timeout)]

    def list_all(self) -> List[Post]:
        """전체 게시글을 최신순으로 조회합니다."""
        return self._stream(self.posts_ref)

    def list_by_query(self, post_query: PostQuery) -> List[Post]:
        """PostQuery의 일치 조건을 Firestore 필터로 변환하여 조회합니다."""
        query = self.posts_ref
        for field_path, value in post_query.equality_filters().items():
            query = query.where(filter=FieldFilter(field_path, '==', value))
        return self._stream(query)

    def list_by_author(self, author_id: str) -> List[Post]:
        query = self.posts_ref.where(filter=FieldFilter('author_id', '==', author_id))
        return self._stream(query)

    # --- 수정 ---
    def update_status(self, post: Post, status: PostStatus) -> Post:
        post_ref = self.posts_ref.document(post.post_id)
        updated_at = DateTimeUtils.now()
        try:
            post_ref.update({'status': status.value, 'updated_at': updated_at}, timeout=self.timeout)
        except gcp_exceptions.NotFound:
            # 권한 확인 이후 다른 요청이 먼저 삭제한 경우
            raise NotFoundError("Post not found")
        post.status = status
        post.updated_at = updated_at
        return post

    # --- 삭제 ---
    def delete_cascade(self, post: Post) -> int:
        """
        게시글, 작성자의 posts 역참조, 종속 댓글을 삭제합니다.

        첫 번째 배치에는 항상 게시글 삭제와 작성자 목록 갱신이 포함됩니다.
        이후 배치가 중간에 실패하더라도 남는 것은 접근할 수 없는 고아 댓글뿐이며
        sweep_orphan_comments로 정리할 수 있습니다.

        :return: 삭제된 댓글 수
        """
        comment_ids = list(dict.fromkeys(
            [doc.id for doc in self.comments_ref.where(filter=FieldFilter('post_id', '==', post.post_id)).stream(timeout=self.timeout)]
            + post.comments
        ))

        batch = self.db.batch()
        batch.delete(self.posts_ref.document(post.post_id))
        batch.set(self.users_ref.document(post.author_id), {'posts': firestore.ArrayRemove([post.post_id])}, merge=True)
        writes = 2
        for comment_id in comment_ids:
            if writes == MAX_BATCH_WRITES:
                batch.commit(timeout=self.timeout)
                batch, writes = self.db.batch(), 0
            batch.delete(self.comments_ref.document(comment_id))
            writes += 1
        batch.commit(timeout=self.timeout)

        logging.info(f"게시글 삭제 완료 (post_id: {post.post_id}, comments: {len(comment_ids)})")
        return len(comment_ids)

    def sweep_orphan_comments(self) -> int:
        """
        부모 게시글이 없는 댓글을 찾아 삭제합니다.
        delete_cascade가 중간에 중단된 경우의 복구 작업입니다.

        :return: 삭제된 댓글 수
        """
        comments_by_post: Dict[str, List[Any]] = {}
        for doc in self.comments_ref.stream(timeout=self.timeout):
            comments_by_post.setdefault(doc.to_dict().get('post_id'), []).append(doc.reference)

        existing = self.get_many([pid for pid in comments_by_post if pid])
        orphan_refs = [ref for pid, refs in comments_by_post.items() if pid not in existing for ref in refs]

        for start in range(0, len(orphan_refs), MAX_BATCH_WRITES):
            batch = self.db.batch()
            for ref in orphan_refs[start:start + MAX_BATCH_WRITES]:
                batch.delete(ref)
            batch.commit(timeout=self.timeout)

        if orphan_refs:
            logging.warning(f"고아 댓글 {len(orphan_refs)}개를 정리했습니다.")
        return len(orphan_refs)
