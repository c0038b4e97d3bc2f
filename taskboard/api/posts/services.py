# taskboard/api/posts/services.py
import logging
from typing import Optional, Dict, Any, List

from taskboard.api.bookmarks.services import BookmarkService
from taskboard.api.comments.services import CommentService
from taskboard.api.posts.repository import PostRepository
from taskboard.api.users.services import UserService
from taskboard.core.security import require_post_author
from taskboard.models.post import Post, PostQuery, PostStatus
from taskboard.services.image_service import ImagePipeline
from taskboard.services.storage_service import StorageService


class PostService:
    """
    게시글 관련 공개 기능을 조합하는 서비스 클래스.
    - 요청자 ID(acting_user_id)는 항상 명시적인 인자로 전달받습니다.
    - 저장은 PostRepository, 댓글은 CommentService, 이미지는 ImagePipeline에 위임합니다.
    """
    def __init__(self,
                 repository: PostRepository,
                 comment_service: CommentService,
                 user_service: UserService,
                 bookmark_service: BookmarkService,
                 image_pipeline: ImagePipeline,
                 storage_service: StorageService):
        self.repository = repository
        self.comment_service = comment_service
        self.user_service = user_service
        self.bookmark_service = bookmark_service
        self.image_pipeline = image_pipeline
        self.storage_service = storage_service

    def create_post(self, acting_user_id: str, title: Any, description: Any, category: Any,
                    location: Any, image_bytes: Optional[bytes] = None) -> Dict[str, Any]:
        """
        새로운 게시글을 생성합니다.
        입력 검증 → 이미지 정규화/업로드 → 게시글 저장 순서로 진행되며,
        이미지 처리에 실패하면 어떤 문서도 저장되지 않습니다.
        """
        Post.validate_fields(title, description, category, location)

        stored_image = self.image_pipeline.ingest(acting_user_id, image_bytes)
        try:
            new_post = self.repository.create(
                title=title, description=description, category=category,
                location=location, author_id=acting_user_id, image=stored_image
            )
        except Exception as e:
            logging.error(f"게시글 저장 실패 (user_id: {acting_user_id}): {e}", exc_info=True)
            self.image_pipeline.discard(stored_image)
            raise

        return self._project([new_post])[0]

    def get_posts(self) -> List[Dict[str, Any]]:
        return self._project(self.repository.list_all())

    def get_posts_by_category(self, category: Any, location: Optional[str] = None,
                              status: Optional[str] = None) -> List[Dict[str, Any]]:
        post_query = PostQuery.from_params(category, location=location, status=status)
        return self._project(self.repository.list_by_query(post_query))

    def get_posts_by_user_id(self, author_id: str) -> List[Dict[str, Any]]:
        """특정 사용자가 작성한 게시물 목록. 본인/타인 조회 모두 같은 규칙을 따릅니다."""
        return self._project(self.repository.list_by_author(author_id))

    def get_post_by_id(self, post_id: str) -> Dict[str, Any]:
        return self._project([self.repository.get_or_404(post_id)])[0]

    def get_bookmarked_posts(self, user_id: str) -> List[Dict[str, Any]]:
        """북마크 순서대로 게시글을 반환합니다. 이미 삭제된 게시글은 제외됩니다."""
        post_ids = self.bookmark_service.get_bookmarked_post_ids(user_id)
        found = self.repository.get_many(post_ids)
        return self._project([found[pid] for pid in post_ids if pid in found])

    def update_status(self, post_id: str, status: Any, acting_user_id: str) -> Dict[str, Any]:
        """게시글 상태를 변경합니다. (작성자 본인만 가능)"""
        new_status = PostStatus.parse(status)
        post = self.repository.get_or_404(post_id)
        require_post_author(post, acting_user_id, message="Unauthorized to edit this post")

        updated = self.repository.update_status(post, new_status)
        logging.info(f"게시글 상태 변경 (post_id: {post_id}, status: {new_status.value})")
        return self._project([updated])[0]

    def delete_post(self, post_id: str, acting_user_id: str) -> None:
        """게시글과 종속 댓글을 삭제합니다. (작성자 본인만 가능)"""
        post = self.repository.get_or_404(post_id)
        require_post_author(post, acting_user_id)

        self.repository.delete_cascade(post)
        if post.image_path:
            # 게시글이 삭제된 뒤의 이미지 정리는 실패해도 요청 결과에 영향을 주지 않습니다.
            self.storage_service.delete_blob(post.image_path)

    def _project(self, posts: List[Post]) -> List[Dict[str, Any]]:
        """
        응답용 딕셔너리를 구성합니다.
        - author: 공개용 작성자 정보
        - comments: 공개용 작성자가 포함된 최신순 댓글 목록
        """
        if not posts:
            return []
        authors = self.user_service.get_public_authors(post.author_id for post in posts)
        comments_by_post = self.comment_service.project_for_posts(posts)

        projected = []
        for post in posts:
            data = post.to_dict()
            data['author'] = authors.get(post.author_id)
            data['comments'] = comments_by_post.get(post.post_id, [])
            projected.append(data)
        return projected

# 서비스 인스턴스는 taskboard/__init__.py에서 생성 및 주입됩니다.
post_service: Optional[PostService] = None
