# taskboard/api/bookmarks/routes.py
import logging
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from taskboard.api.posts.schemas import PostResponseSchema
from taskboard.core.errors import TaskBoardError, error_response, from_unexpected


bookmarks_bp = Blueprint('bookmarks_bp', __name__)

@bookmarks_bp.route('/posts/<string:post_id>/bookmark', methods=['POST'])
@jwt_required()
def toggle_bookmark(post_id: str):
    """
    게시글을 북마크하거나 북마크를 해제합니다.
    - type: 'saved' 또는 'unsaved'
    """
    bookmark_service = current_app.services['bookmarks']
    user_id = get_jwt_identity()
    try:
        result = bookmark_service.toggle(user_id, post_id)
        return jsonify({"type": result.value, "message": result.message, "success": True}), 200
    except TaskBoardError as e:
        return error_response(e)
    except Exception as e:
        logging.error(f"북마크 처리 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error updating bookmark"))


@bookmarks_bp.route('/users/me/bookmarks', methods=['GET'])
@jwt_required()
def get_my_bookmarks():
    """로그인한 사용자가 북마크한 게시글 목록을 조회합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        posts = post_service.get_bookmarked_posts(user_id)
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "success": True}), 200
    except Exception as e:
        logging.error(f"북마크 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching bookmarks"))
