# taskboard/services/storage_service.py
import uuid
import logging
from typing import Dict, Optional
from flask import Flask
from firebase_admin import storage

class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 범용 서비스 클래스입니다.
    서버에서 가공한 바이트를 업로드하고 공개 URL을 반환하거나, 더 이상 쓰이지 않는 객체를 삭제합니다.
    """

    def __init__(self, bucket=None, timeout: Optional[float] = None):
        """
        버킷을 직접 주입받거나, None으로 두고 init_app에서 설정합니다.

        :param bucket: google.cloud.storage.Bucket 호환 객체
        :param timeout: 모든 Storage 호출에 적용할 타임아웃(초)
        """
        self.bucket = bucket
        self.timeout = timeout

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷과 타임아웃을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        self.timeout = app.config.get('STORAGE_TIMEOUT_SECONDS', self.timeout)
        if self.bucket is not None:
            return

        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.bucket

    def upload_bytes(self, folder_path: str, data: bytes, content_type: str, extension: str) -> Dict[str, str]:
        """
        바이트 데이터를 고유한 이름으로 업로드하고 공개 URL을 반환합니다.

        :param folder_path: 저장될 폴더 경로 (예: "posts/{user_id}")
        :param data: 업로드할 바이트
        :param content_type: MIME 타입 (예: "image/jpeg")
        :param extension: 파일 확장자 (점 제외)
        :return: {"path": 저장 경로, "url": 공개 URL}
        """
        bucket = self._require_bucket()
        destination_blob_name = f"{folder_path}/{uuid.uuid4()}.{extension}"
        blob = bucket.blob(destination_blob_name)

        try:
            blob.upload_from_string(data, content_type=content_type, timeout=self.timeout)
            blob.make_public(timeout=self.timeout)
        except Exception as e:
            logging.error(f"Storage 업로드 실패 (path: {destination_blob_name}): {e}", exc_info=True)
            raise

        logging.info(f"Storage 업로드 완료 (path: {destination_blob_name}, size: {len(data)})")
        return {"path": destination_blob_name, "url": blob.public_url}

    def delete_blob(self, file_path: str) -> bool:
        """
        지정된 객체를 삭제합니다. 실패해도 예외를 올리지 않고 False를 반환합니다.

        :param file_path: 삭제할 객체 경로
        :return: 삭제 여부
        """
        if not file_path:
            return False
        try:
            blob = self._require_bucket().blob(file_path)
            if not blob.exists(timeout=self.timeout):
                return False
            blob.delete(timeout=self.timeout)
            logging.info(f"Storage 객체 삭제 완료 (path: {file_path})")
            return True
        except Exception as e:
            logging.error(f"Storage 객체 삭제 실패 (path: {file_path}): {e}")
            return False
