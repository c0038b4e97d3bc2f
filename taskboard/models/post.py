# taskboard/models/post.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from taskboard.core.errors import ValidationError
from taskboard.utils.datetime_utils import DateTimeUtils


class PostCategory(Enum):
    TRANSPORT = "Transport"
    RENTAL = "Rental"
    SKILLS = "Skills"

    @classmethod
    def parse(cls, value: Any) -> "PostCategory":
        """문자열을 PostCategory로 변환합니다. 허용되지 않은 값이면 ValidationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("Invalid category")


class PostStatus(Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"

    @classmethod
    def parse(cls, value: Any) -> "PostStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("Invalid status")


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    작성자 정보는 임베드하지 않고 author_id로만 참조합니다.
    """
    post_id: str
    author_id: str
    title: str
    description: str
    category: PostCategory
    location: str
    image: Optional[str] = None
    image_path: Optional[str] = None  # Storage 객체 경로 (삭제 시 사용)
    status: PostStatus = PostStatus.OPEN
    comments: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @staticmethod
    def validate_fields(title: Any, description: Any, category: Any, location: Any) -> PostCategory:
        """
        게시글 작성 필드를 검증하고 변환된 카테고리를 반환합니다.
        필수 필드 누락을 카테고리 오류보다 먼저 검사합니다.
        """
        if any(_is_blank(value) for value in (title, description, location)) or not category:
            raise ValidationError("Some fields Are Missing")
        return PostCategory.parse(category)

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 저장용 딕셔너리. Enum 멤버는 문자열 값으로 변환합니다."""
        data = asdict(self)
        data['category'] = self.category.value
        data['status'] = self.status.value
        return DateTimeUtils.for_firestore(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Firestore 문서 딕셔너리로부터 Post 인스턴스를 생성합니다."""
        processed = dict(data)
        processed['category'] = PostCategory.parse(processed.get('category'))
        processed['status'] = PostStatus.parse(processed.get('status') or PostStatus.OPEN.value)
        processed['comments'] = list(processed.get('comments') or [])
        for key in ('created_at', 'updated_at'):
            if processed.get(key) is not None:
                processed[key] = DateTimeUtils.from_firestore(processed[key])
            else:
                processed.pop(key, None)
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed.items() if k in known})


@dataclass(frozen=True)
class PostQuery:
    """
    카테고리별 목록 조회 조건.
    category는 필수, location/status는 값이 주어졌을 때만 일치 조건으로 사용됩니다.
    """
    category: PostCategory
    location: Optional[str] = None
    status: Optional[PostStatus] = None

    @classmethod
    def from_params(cls, category: Any, location: Optional[str] = None, status: Optional[str] = None) -> "PostQuery":
        return cls(
            category=PostCategory.parse(category),
            location=location or None,
            status=PostStatus.parse(status) if status else None,
        )

    def equality_filters(self) -> Dict[str, str]:
        """Firestore 필드명과 일치 조건 값의 매핑."""
        filters = {'category': self.category.value}
        if self.location is not None:
            filters['location'] = self.location
        if self.status is not None:
            filters['status'] = self.status.value
        return filters
