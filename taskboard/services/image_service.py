# taskboard/services/image_service.py

import io
import logging
from typing import Dict, Optional

from PIL import Image, UnidentifiedImageError

from taskboard.core.errors import ImageProcessingError
from taskboard.services.storage_service import StorageService


class ImagePipeline:
    """
    게시글 첨부 이미지를 정규화하여 Storage에 올리는 파이프라인.

    1. 디코딩 후 RGB 채널로 통일
    2. 가로/세로 모두 max_dimension 이하가 되도록 비율을 유지하며 축소 (확대하지 않음)
    3. 고정 품질의 JPEG로 재인코딩
    4. Storage 업로드 후 공개 URL 반환
    """
    CONTENT_TYPE = "image/jpeg"

    def __init__(self, storage_service: StorageService, max_dimension: int = 800, quality: int = 80):
        self.storage_service = storage_service
        self.max_dimension = max_dimension
        self.quality = quality

    def normalize(self, image_bytes: bytes) -> bytes:
        """이미지 바이트를 축소/재인코딩한 JPEG 바이트로 변환합니다."""
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                if image.mode != "RGB":
                    image = image.convert("RGB")
                # thumbnail은 비율을 유지하며 경계 상자 안에 맞추고, 원본보다 키우지 않습니다.
                image.thumbnail((self.max_dimension, self.max_dimension))

                buffer = io.BytesIO()
                image.save(buffer, format="JPEG", quality=self.quality)
                return buffer.getvalue()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logging.warning(f"이미지 디코딩 실패: {e}")
            raise ImageProcessingError("Invalid image file") from e

    def ingest(self, owner_id: str, image_bytes: Optional[bytes]) -> Optional[Dict[str, str]]:
        """
        이미지를 정규화하여 업로드합니다.

        :param owner_id: 업로드 경로에 사용할 작성자 ID
        :param image_bytes: 원본 바이트 (없으면 None 반환)
        :return: {"path", "url"} 또는 None
        """
        if not image_bytes:
            return None

        encoded = self.normalize(image_bytes)
        try:
            return self.storage_service.upload_bytes(
                folder_path=f"posts/{owner_id}",
                data=encoded,
                content_type=self.CONTENT_TYPE,
                extension="jpg",
            )
        except Exception as e:
            logging.error(f"게시글 이미지 업로드 실패 (owner_id: {owner_id}): {e}", exc_info=True)
            raise ImageProcessingError("Image upload failed", status_code=502) from e

    def discard(self, stored_image: Optional[Dict[str, str]]) -> None:
        """게시글 저장에 실패한 경우 업로드된 이미지를 정리합니다."""
        if stored_image:
            self.storage_service.delete_blob(stored_image.get("path"))
