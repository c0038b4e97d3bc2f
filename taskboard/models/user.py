# taskboard/models/user.py
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any


@dataclass
class Author:
    """
    게시글/댓글 응답에 포함되는 공개용 작성자 정보.
    'users' 문서 중 식별자와 프로필 이미지만 노출하며 인증 정보는 포함하지 않습니다.
    """
    user_id: str
    nickname: Optional[str] = None
    profile_image_url: Optional[str] = None

    @classmethod
    def from_user_doc(cls, user_id: str, data: Optional[Dict[str, Any]]) -> "Author":
        data = data or {}
        return cls(
            user_id=user_id,
            nickname=data.get('nickname'),
            profile_image_url=data.get('profile_image_url'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
