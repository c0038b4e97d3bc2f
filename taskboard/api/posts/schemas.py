# taskboard/api/posts/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from taskboard.api.comments.schemas import CommentResponseSchema
from taskboard.api.users.schemas import AuthorSchema
from taskboard.models.post import PostCategory, PostStatus

CATEGORY_VALUES = [c.value for c in PostCategory]
STATUS_VALUES = [s.value for s in PostStatus]

MISSING_FIELDS = "Some fields Are Missing"
_required_field = {"required": MISSING_FIELDS, "null": MISSING_FIELDS, "invalid": MISSING_FIELDS}

# --- API 요청 스키마 ---

class PostCreateSchema(Schema):
    """POST /api/posts 요청(multipart form)의 유효성을 검사합니다. 이미지 파일은 별도로 받습니다."""
    class Meta:
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=validate.Length(min=1, error=MISSING_FIELDS), error_messages=_required_field)
    description = fields.Str(required=True, validate=validate.Length(min=1, error=MISSING_FIELDS), error_messages=_required_field)
    location = fields.Str(required=True, validate=validate.Length(min=1, error=MISSING_FIELDS), error_messages=_required_field)
    category = fields.Str(required=True, validate=validate.OneOf(CATEGORY_VALUES, error="Invalid category"), error_messages=_required_field)

class PostCategoryQuerySchema(Schema):
    """GET /api/posts/category 쿼리 파라미터. location/status는 선택 필터입니다."""
    class Meta:
        unknown = EXCLUDE

    category = fields.Str(
        required=True,
        validate=validate.OneOf(CATEGORY_VALUES, error="Invalid category"),
        error_messages={"required": "Invalid category", "null": "Invalid category"}
    )
    location = fields.Str(load_default=None)
    status = fields.Str(load_default=None, validate=validate.OneOf(STATUS_VALUES, error="Invalid status"))

class PostStatusUpdateSchema(Schema):
    """PATCH /api/posts/{post_id}/status 요청 본문의 유효성을 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    status = fields.Str(
        required=True,
        validate=validate.OneOf(STATUS_VALUES, error="Invalid status"),
        error_messages={"required": "Invalid status", "null": "Invalid status", "invalid": "Invalid status"}
    )

# --- API 응답 스키마 ---

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다."""
    post_id = fields.Str(dump_only=True)
    title = fields.Str(required=True)
    description = fields.Str(required=True)
    image = fields.Str(allow_none=True)
    category = fields.Str(required=True)
    location = fields.Str(required=True)
    status = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, allow_none=True)
    comments = fields.List(fields.Nested(CommentResponseSchema), dump_default=list)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
