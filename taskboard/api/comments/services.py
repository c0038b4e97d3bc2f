# taskboard/api/comments/services.py

import logging
import uuid
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from typing import Optional, Dict, Any, List, Iterable

from taskboard.api.users.services import UserService
from taskboard.core.errors import ValidationError, NotFoundError
from taskboard.models.comment import Comment
from taskboard.models.post import Post
from taskboard.utils.datetime_utils import DateTimeUtils

class CommentService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글 생성과 조회, 게시글 응답에 포함될 댓글 목록 구성을 담당합니다.
    - 댓글은 개별 삭제되지 않으며 부모 게시글과 함께 삭제됩니다.
    """
    def __init__(self, user_service: UserService, db=None, timeout: Optional[float] = None):
        """서비스 초기화 시 Firestore 클라이언트 및 컬렉션 참조를 설정합니다."""
        self.db = db or firestore.client()
        self.comments_ref = self.db.collection('comments')
        self.posts_ref = self.db.collection('posts')
        self.user_service = user_service
        self.timeout = timeout

    def _add_in_transaction(self, transaction, post_id: str, author_id: str, text: str) -> Comment:
        post_ref = self.posts_ref.document(post_id)
        post_snapshot = post_ref.get(transaction=transaction, timeout=self.timeout)
        if not post_snapshot.exists:
            raise NotFoundError("Post not found")

        new_comment = Comment(
            comment_id=str(uuid.uuid4()),
            post_id=post_id,
            author_id=author_id,
            text=text
        )
        transaction.set(self.comments_ref.document(new_comment.comment_id), new_comment.to_dict())
        transaction.update(post_ref, {'comments': firestore.ArrayUnion([new_comment.comment_id])})
        return new_comment

    def add_comment(self, post_id: str, text: Any, author_id: str) -> Dict[str, Any]:
        """
        새로운 댓글을 생성합니다.
        댓글 문서 생성과 게시글 comments 목록 추가는 하나의 트랜잭션으로 처리됩니다.
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("text is required")

        transaction = self.db.transaction()
        new_comment = firestore.transactional(self._add_in_transaction)(transaction, post_id, author_id, text.strip())
        logging.info(f"댓글 생성 완료 (post_id: {post_id}, comment_id: {new_comment.comment_id})")

        return self._project([new_comment])[0]

    def get_comments_for_post(self, post_id: str) -> List[Dict[str, Any]]:
        """특정 게시글의 댓글 목록을 최신순으로 조회합니다. 게시글이 없으면 빈 목록입니다."""
        query = (self.comments_ref
                 .where(filter=FieldFilter('post_id', '==', post_id))
                 .order_by('created_at', direction=firestore.Query.DESCENDING))
        comments = [Comment.from_dict(doc.to_dict()) for doc in query.stream(timeout=self.timeout)]
        return self._project(comments)

    def project_for_posts(self, posts: Iterable[Post]) -> Dict[str, List[Dict[str, Any]]]:
        """
        게시글의 comments 참조 목록을 따라 댓글을 일괄 조회하고 게시글별로 묶습니다.
        :return: {post_id: [최신순 댓글 응답 딕셔너리]}
        """
        posts = list(posts)
        comment_ids = list(dict.fromkeys(cid for post in posts for cid in post.comments))
        grouped: Dict[str, List[Dict[str, Any]]] = {post.post_id: [] for post in posts}
        if not comment_ids:
            return grouped

        refs = [self.comments_ref.document(cid) for cid in comment_ids]
        comments = [
            Comment.from_dict(snapshot.to_dict())
            for snapshot in self.db.get_all(refs, timeout=self.timeout)
            if snapshot.exists
        ]
        for projected in self._project(comments):
            if projected['post_id'] in grouped:
                grouped[projected['post_id']].append(projected)
        return grouped

    def _project(self, comments: List[Comment]) -> List[Dict[str, Any]]:
        """작성자를 공개용 정보로 치환하고 최신순으로 정렬합니다."""
        authors = self.user_service.get_public_authors(c.author_id for c in comments)
        ordered = sorted(comments, key=lambda c: DateTimeUtils.sort_key(c.created_at), reverse=True)
        projected = []
        for comment in ordered:
            data = comment.to_dict()
            data['author'] = authors.get(comment.author_id)
            projected.append(data)
        return projected

# 서비스 인스턴스는 taskboard/__init__.py에서 생성 및 주입됩니다.
comment_service: Optional[CommentService] = None
