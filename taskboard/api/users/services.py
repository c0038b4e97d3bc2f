# taskboard/api/users/services.py
import logging
from typing import Optional, Dict, Any, Iterable

from firebase_admin import firestore

from taskboard.models.user import Author


class UserService:
    """
    게시글/댓글 응답에 포함할 공개용 작성자 정보를 조회하는 서비스.
    'users' 문서는 외부 Identity 컴포넌트가 소유하므로 이 서비스는 읽기만 합니다.
    """
    def __init__(self, db=None, timeout: Optional[float] = None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')
        self.timeout = timeout

    def get_public_authors(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        여러 사용자의 공개 프로필을 한 번에 조회합니다.
        :param user_ids: 조회할 사용자 ID 목록 (중복 허용)
        :return: {user_id: {'user_id', 'nickname', 'profile_image_url'}}
        """
        unique_ids = [uid for uid in dict.fromkeys(user_ids) if uid]
        if not unique_ids:
            return {}

        refs = [self.users_ref.document(uid) for uid in unique_ids]
        try:
            found = {snapshot.id: snapshot.to_dict() for snapshot in self.db.get_all(refs, timeout=self.timeout) if snapshot.exists}
        except Exception as e:
            logging.error(f"작성자 정보 일괄 조회 실패 (count: {len(unique_ids)}): {e}", exc_info=True)
            raise

        # 사용자 문서가 없더라도 식별자만 담긴 공개 정보로 응답합니다.
        return {uid: Author.from_user_doc(uid, found.get(uid)).to_dict() for uid in unique_ids}

# 서비스 인스턴스는 taskboard/__init__.py에서 생성 및 주입됩니다.
user_service: Optional[UserService] = None
