# taskboard/core/config.py

import os # 'os' 모듈: 환경 변수를 읽기 위해 사용합니다.
from datetime import timedelta


def _int_env(key: str, default: int) -> int:
    """정수형 환경 변수를 읽습니다. 값이 없으면 기본값을 사용합니다."""
    value = os.getenv(key)
    return int(value) if value else default


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명 키. Auth Provider가 발급한 토큰의 위변조를 검증하는 데 사용됩니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=_int_env('JWT_ACCESS_TOKEN_HOURS', 1))

    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 외부 호출(Firestore, Storage)은 모두 타임아웃으로 제한됩니다.
    FIRESTORE_TIMEOUT_SECONDS = _int_env('FIRESTORE_TIMEOUT_SECONDS', 10)
    STORAGE_TIMEOUT_SECONDS = _int_env('STORAGE_TIMEOUT_SECONDS', 30)

    # 게시글 이미지 정규화 설정 (긴 변 최대 길이, JPEG 품질)
    IMAGE_MAX_DIMENSION = _int_env('IMAGE_MAX_DIMENSION', 800)
    IMAGE_JPEG_QUALITY = _int_env('IMAGE_JPEG_QUALITY', 80)

    # 업로드 요청 본문 최대 크기 (기본 10MB)
    MAX_CONTENT_LENGTH = _int_env('MAX_CONTENT_LENGTH', 10 * 1024 * 1024)

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('TEST_JWT_SECRET_KEY', 'taskboard-testing-secret-key-0123456789')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('TEST_FIREBASE_STORAGE_BUCKET', 'taskboard-test.appspot.com')


class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False


# FLASK_ENV 값에 따라 create_app에서 적절한 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
