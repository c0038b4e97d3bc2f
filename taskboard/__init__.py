# taskboard/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
import click
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정 및 공통 예외
from taskboard.core.config import config_by_name
from taskboard.core.errors import TaskBoardError, to_envelope, first_error_message

# - API 블루프린트
from taskboard.api.posts.routes import posts_bp
from taskboard.api.comments.routes import comments_bp
from taskboard.api.bookmarks.routes import bookmarks_bp

# - 서비스 모듈
from taskboard.services.storage_service import StorageService
from taskboard.services.image_service import ImagePipeline
from taskboard.api.users.services import UserService
from taskboard.api.comments.services import CommentService
from taskboard.api.bookmarks.services import BookmarkService
from taskboard.api.posts.repository import PostRepository
from taskboard.api.posts.services import PostService


def _init_firebase(app: Flask) -> None:
    """Firebase Admin SDK를 한 번만 초기화합니다."""
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def _register_jwt_handlers(jwt: JWTManager) -> None:
    """인증 실패도 동일한 실패 응답 형식으로 반환합니다."""
    def _unauthorized(message: str):
        return jsonify({"success": False, "message": message, "error_code": "UNAUTHORIZED"}), 401

    @jwt.unauthorized_loader
    def handle_missing_token(reason):
        return _unauthorized("Authorization header is missing or invalid")

    @jwt.invalid_token_loader
    def handle_invalid_token(reason):
        return _unauthorized("Invalid token")

    @jwt.expired_token_loader
    def handle_expired_token(jwt_header, jwt_payload):
        return _unauthorized("Token has expired")


def create_app(config_name: str = None, db=None, bucket=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param db: Firestore 클라이언트 (주입하지 않으면 Firebase Admin SDK로 생성)
    :param bucket: Storage 버킷 (주입하지 않으면 설정의 버킷 사용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    _register_jwt_handlers(JWTManager(app))

    if db is None or bucket is None:
        _init_firebase(app)
    if db is None:
        db = firestore.client()

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}
    firestore_timeout = app.config['FIRESTORE_TIMEOUT_SECONDS']

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스
    try:
        storage_instance = StorageService(bucket=bucket)
        storage_instance.init_app(app)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    app.services['images'] = ImagePipeline(
        storage_service=app.services['storage'],
        max_dimension=app.config['IMAGE_MAX_DIMENSION'],
        quality=app.config['IMAGE_JPEG_QUALITY']
    )
    app.services['users'] = UserService(db=db, timeout=firestore_timeout)

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스
    app.services['comments'] = CommentService(user_service=app.services['users'], db=db, timeout=firestore_timeout)
    app.services['bookmarks'] = BookmarkService(db=db, timeout=firestore_timeout)
    app.services['post_repository'] = PostRepository(db=db, timeout=firestore_timeout)
    app.services['posts'] = PostService(
        repository=app.services['post_repository'],
        comment_service=app.services['comments'],
        user_service=app.services['users'],
        bookmark_service=app.services['bookmarks'],
        image_pipeline=app.services['images'],
        storage_service=app.services['storage']
    )

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api')
    app.register_blueprint(bookmarks_bp, url_prefix='/api')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"success": False, "message": first_error_message(err.messages),
                    "error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(TaskBoardError)
    def handle_taskboard_error(err):
        return jsonify(to_envelope(err)), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        response = {"success": False, "message": err.description, "error_code": err.name.upper().replace(' ', '_')}
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"success": False, "message": "Internal server error", "error_code": "INTERNAL_SERVER_ERROR"}
        return jsonify(response), 500

    # =====================================================================================
    # 8. CLI 명령 (정합성 복구 작업)
    # =====================================================================================
    @app.cli.command('sweep-orphan-comments')
    def sweep_orphan_comments_command():
        """부모 게시글이 삭제된 고아 댓글을 정리합니다."""
        deleted = app.services['post_repository'].sweep_orphan_comments()
        click.echo(f"{deleted}개의 고아 댓글을 삭제했습니다.")

    # =====================================================================================
    # 9. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'),
                            format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
