# taskboard/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from taskboard.api.comments.schemas import CommentCreateSchema, CommentResponseSchema
from taskboard.core.errors import TaskBoardError, error_response, first_error_message, from_unexpected
from taskboard.core.errors import ValidationError as RequestValidationError


comments_bp = Blueprint('comments_bp', __name__)

@comments_bp.route('/posts/<string:post_id>/comments', methods=['POST'])
@jwt_required()
def create_comment(post_id: str):
    comment_service = current_app.services['comments']
    """
    특정 게시글에 새로운 댓글을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
        new_comment = comment_service.add_comment(post_id, data['text'], user_id)
        return jsonify({
            "message": "Comment Added",
            "comment": CommentResponseSchema().dump(new_comment),
            "success": True
        }), 201
    except ValidationError as err:
        return error_response(RequestValidationError(first_error_message(err.messages)))
    except TaskBoardError as e: # 빈 댓글 또는 게시물이 없는 경우
        return error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error adding comment"))

@comments_bp.route('/posts/<string:post_id>/comments', methods=['GET'])
@jwt_required(optional=True)
def get_comments(post_id: str):
    comment_service = current_app.services['comments']
    """
    특정 게시글의 댓글 목록을 최신순으로 조회합니다.
    댓글이 없거나 게시글이 없으면 빈 목록을 반환합니다.
    """
    try:
        comments = comment_service.get_comments_for_post(post_id)
        return jsonify({"success": True, "comments": CommentResponseSchema(many=True).dump(comments)}), 200
    except Exception as e:
        logging.error(f"댓글 목록 조회 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching comments"))
