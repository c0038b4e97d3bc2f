# taskboard/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from taskboard.api.posts.schemas import (
    PostCreateSchema,
    PostCategoryQuerySchema,
    PostStatusUpdateSchema,
    PostResponseSchema
)
from taskboard.core.errors import TaskBoardError, error_response, first_error_message, from_unexpected
from taskboard.core.errors import ValidationError as RequestValidationError


posts_bp = Blueprint('posts_bp', __name__)


def _schema_error(err: ValidationError):
    return error_response(RequestValidationError(first_error_message(err.messages)))


@posts_bp.route('/', methods=['POST'])
@jwt_required()
def create_post():
    post_service = current_app.services['posts']
    """
    새로운 게시글을 생성합니다.
    - 요청은 multipart form 이며, 선택적으로 'image' 파일을 포함할 수 있습니다.
    - 성공 시, 생성된 게시글 정보를 201 Created 상태 코드와 함께 반환합니다.
    """
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.form.to_dict())
        image_file = request.files.get('image')
        image_bytes = image_file.read() if image_file and image_file.filename else None

        new_post = post_service.create_post(
            user_id, data['title'], data['description'], data['category'], data['location'],
            image_bytes=image_bytes
        )
        return jsonify({
            "message": "New post added",
            "post": PostResponseSchema().dump(new_post),
            "success": True
        }), 201
    except ValidationError as err:
        return _schema_error(err)
    except TaskBoardError as e:
        return error_response(e)
    except HTTPException:
        # 요청 본문 크기 초과(413) 등은 전역 핸들러가 응답합니다.
        raise
    except Exception as e:
        logging.error(f"게시글 생성 중 오류 발생: {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error adding new post"))


@posts_bp.route('/', methods=['GET'])
@jwt_required(optional=True) # 비로그인 사용자도 전체 목록은 볼 수 있도록 허용
def get_posts():
    post_service = current_app.services['posts']
    """전체 게시글 목록을 최신순으로 조회합니다."""
    try:
        posts = post_service.get_posts()
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "success": True}), 200
    except Exception as e:
        logging.error(f"게시글 목록 조회 중 오류 발생: {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching posts"))


@posts_bp.route('/category', methods=['GET'])
@jwt_required(optional=True)
def get_posts_by_category():
    post_service = current_app.services['posts']
    """
    카테고리별 게시글 목록을 조회합니다.
    - category는 필수, location/status는 값이 있을 때만 필터로 사용합니다.
    """
    # 빈 문자열 파라미터는 필터가 없는 것으로 취급
    params = {key: value for key, value in request.args.items() if value != ''}
    try:
        query = PostCategoryQuerySchema().load(params)
        posts = post_service.get_posts_by_category(query['category'], location=query['location'], status=query['status'])
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "success": True}), 200
    except ValidationError as err:
        return _schema_error(err)
    except TaskBoardError as e:
        return error_response(e)
    except Exception as e:
        logging.error(f"카테고리별 게시글 조회 중 오류 발생: {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching posts"))


@posts_bp.route('/me', methods=['GET'])
@jwt_required()
def get_my_posts():
    post_service = current_app.services['posts']
    """로그인한 사용자가 작성한 게시글 목록을 조회합니다."""
    user_id = get_jwt_identity()
    try:
        posts = post_service.get_posts_by_user_id(user_id)
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "success": True}), 200
    except Exception as e:
        logging.error(f"내 게시글 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching posts"))


@posts_bp.route('/users/<string:author_id>', methods=['GET'])
@jwt_required(optional=True)
def get_user_posts(author_id: str):
    post_service = current_app.services['posts']
    """특정 사용자가 작성한 게시글 목록을 조회합니다."""
    try:
        posts = post_service.get_posts_by_user_id(author_id)
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "success": True}), 200
    except Exception as e:
        logging.error(f"사용자 게시물 목록 조회 중 오류 발생 (author_id: {author_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching posts"))


@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id: str):
    """특정 게시글의 상세 정보를 조회합니다."""
    post_service = current_app.services['posts']
    try:
        post = post_service.get_post_by_id(post_id)
        return jsonify({"post": PostResponseSchema().dump(post), "success": True}), 200
    except TaskBoardError as e:
        return error_response(e)
    except Exception as e:
        logging.error(f"게시글 조회 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error fetching post"))


@posts_bp.route('/<string:post_id>/status', methods=['PATCH'])
@jwt_required()
def update_post_status(post_id: str):
    """게시글 상태(Open/In Progress/Closed)를 변경합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostStatusUpdateSchema().load(request.get_json(silent=True) or {})
        updated_post = post_service.update_status(post_id, data['status'], user_id)
        return jsonify({
            "message": "Post status updated successfully",
            "post": PostResponseSchema().dump(updated_post),
            "success": True
        }), 200
    except ValidationError as err:
        return _schema_error(err)
    except TaskBoardError as e:
        return error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"게시글 상태 변경 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error updating post status"))


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """특정 게시글과 댓글을 삭제합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        post_service.delete_post(post_id, user_id)
        return jsonify({"success": True, "message": "Post deleted"}), 200
    except TaskBoardError as e:
        return error_response(e)
    except Exception as e:
        logging.error(f"게시글 삭제 중 오류 발생 (post_id: {post_id}): {e}", exc_info=True)
        return error_response(from_unexpected(e, "Error deleting post"))
