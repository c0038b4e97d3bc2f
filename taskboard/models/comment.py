# taskboard/models/comment.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, Any

from taskboard.utils.datetime_utils import DateTimeUtils


@dataclass
class Comment:
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    post_id는 생성 시 한 번 정해지며 변경되지 않습니다.
    """
    comment_id: str
    post_id: str
    author_id: str
    text: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    def to_dict(self) -> Dict[str, Any]:
        return DateTimeUtils.for_firestore(asdict(self))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        processed = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if processed.get('created_at') is not None:
            processed['created_at'] = DateTimeUtils.from_firestore(processed['created_at'])
        else:
            processed.pop('created_at', None)
        return cls(**processed)
