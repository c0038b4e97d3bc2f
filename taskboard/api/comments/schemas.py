# taskboard/api/comments/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE
from taskboard.api.users.schemas import AuthorSchema

class CommentCreateSchema(Schema):
    """
    POST /api/posts/{post_id}/comments
    댓글 생성을 요청할 때의 데이터 형식을 정의하고 유효성을 검사합니다.
    """
    class Meta:
        unknown = EXCLUDE

    text = fields.Str(
        required=True,
        validate=validate.Length(min=1, error="text is required"),
        error_messages={"required": "text is required", "null": "text is required", "invalid": "text is required"}
    )

class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    """
    comment_id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, allow_none=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
