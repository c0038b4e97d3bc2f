# taskboard/api/users/schemas.py
from marshmallow import Schema, fields

class AuthorSchema(Schema):
    """
    게시글/댓글 응답에 포함되는 공개용 작성자 정보 스키마.
    민감한 정보(예: email, 인증 정보)는 제외하고 식별자와 프로필 이미지만 반환합니다.
    """
    user_id = fields.Str(required=True, dump_only=True)
    nickname = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)
