# taskboard/conftest.py
"""
pytest 공용 픽스처

실제 Firebase 프로젝트 없이 서비스/라우트를 검증하기 위해
Firestore 클라이언트와 Storage 버킷을 메모리 기반 대역(test double)으로 대체합니다.
"""
import copy
import io
import uuid

import pytest
from firebase_admin import firestore
from flask_jwt_extended import create_access_token
from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore_v1.transforms import ArrayUnion, ArrayRemove
from PIL import Image

from taskboard import create_app

MAX_BATCH_WRITES = 500


# =====================================================================================
# Firestore 대역
# =====================================================================================

class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocumentReference:
    def __init__(self, client, collection_name, doc_id):
        self._client = client
        self.collection_name = collection_name
        self.id = doc_id

    @property
    def path(self):
        return f"{self.collection_name}/{self.id}"

    def get(self, transaction=None, **kwargs):
        self._client.read_options.append(kwargs)
        return FakeSnapshot(self, self._client._read(self))

    def set(self, document_data, merge=False, **kwargs):
        self._client._apply([('set', self, document_data, merge)])

    def update(self, field_updates, **kwargs):
        self._client._apply([('update', self, field_updates, False)])

    def delete(self, **kwargs):
        self._client._apply([('delete', self, None, False)])


class FakeQuery:
    def __init__(self, client, collection_name, filters=(), orders=()):
        self._client = client
        self._collection_name = collection_name
        self._filters = tuple(filters)
        self._orders = tuple(orders)

    def _copy(self, **changes):
        params = dict(filters=self._filters, orders=self._orders)
        params.update(changes)
        return FakeQuery(self._client, self._collection_name, **params)

    def where(self, field_path=None, op_string=None, value=None, *, filter=None):
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path, direction=firestore.Query.ASCENDING):
        return self._copy(orders=self._orders + ((field_path, direction),))

    @staticmethod
    def _matches(data, field_path, op_string, value):
        if op_string != "==":
            raise NotImplementedError(op_string)
        return field_path in data and data[field_path] == value

    def stream(self, transaction=None, **kwargs):
        collection = self._client._collections.get(self._collection_name, {})
        rows = [
            (doc_id, data) for doc_id, data in collection.items()
            if all(self._matches(data, *condition) for condition in self._filters)
        ]
        for field_path, direction in reversed(self._orders):
            # Firestore는 정렬 필드가 없는 문서를 결과에서 제외합니다.
            rows = [row for row in rows if field_path in row[1]]
            rows.sort(key=lambda row: row[1][field_path], reverse=(direction == firestore.Query.DESCENDING))
        for doc_id, data in rows:
            yield FakeSnapshot(FakeDocumentReference(self._client, self._collection_name, doc_id), data)


class FakeCollectionReference(FakeQuery):
    def __init__(self, client, name):
        super().__init__(client, name)
        self.id = name

    def document(self, document_id=None):
        return FakeDocumentReference(self._client, self._collection_name, document_id or uuid.uuid4().hex)


class FakeWriteBatch:
    def __init__(self, client):
        self._client = client
        self._writes = []

    def _add(self, write):
        if len(self._writes) >= MAX_BATCH_WRITES:
            raise gcp_exceptions.InvalidArgument("maximum 500 writes allowed per request")
        self._writes.append(write)

    def set(self, reference, document_data, merge=False):
        self._add(('set', reference, document_data, merge))

    def update(self, reference, field_updates):
        self._add(('update', reference, field_updates, False))

    def delete(self, reference):
        self._add(('delete', reference, None, False))

    def commit(self, **kwargs):
        self._client.commit_count += 1
        if self._client.commit_errors:
            raise self._client.commit_errors.pop(0)
        self._client._apply(self._writes)
        self._writes = []


class FakeTransaction(FakeWriteBatch):
    def commit(self, **kwargs):
        self._client._apply(self._writes)
        self._writes = []


class FakeFirestoreClient:
    """테스트에서 사용하는 메모리 기반 Firestore 클라이언트."""
    def __init__(self):
        self._collections = {}
        self.commit_count = 0
        self.commit_errors = []
        self.read_options = []

    def collection(self, name):
        return FakeCollectionReference(self, name)

    def batch(self):
        return FakeWriteBatch(self)

    def transaction(self, **kwargs):
        return FakeTransaction(self)

    def get_all(self, references, **kwargs):
        for reference in references:
            yield FakeSnapshot(reference, self._read(reference))

    # --- 테스트 보조 ---
    def seed(self, collection_name, doc_id, data):
        self._collections.setdefault(collection_name, {})[doc_id] = copy.deepcopy(data)

    def data(self, collection_name, doc_id):
        return copy.deepcopy(self._collections.get(collection_name, {}).get(doc_id))

    def ids(self, collection_name):
        return set(self._collections.get(collection_name, {}))

    # --- 내부 구현 ---
    def _read(self, reference):
        return self._collections.get(reference.collection_name, {}).get(reference.id)

    @staticmethod
    def _transform(current, value):
        if isinstance(value, ArrayUnion):
            merged = list(current) if isinstance(current, list) else []
            merged.extend(v for v in value.values if v not in merged)
            return merged
        if isinstance(value, ArrayRemove):
            return [v for v in (current if isinstance(current, list) else []) if v not in value.values]
        return copy.deepcopy(value)

    def _apply(self, writes):
        """모든 쓰기를 원자적으로 적용합니다. 하나라도 실패하면 아무것도 반영되지 않습니다."""
        staged = copy.deepcopy(self._collections)
        for kind, reference, payload, merge in writes:
            collection = staged.setdefault(reference.collection_name, {})
            existing = collection.get(reference.id)
            if kind == 'delete':
                collection.pop(reference.id, None)
            elif kind == 'update':
                if existing is None:
                    raise gcp_exceptions.NotFound(f"No document to update: {reference.path}")
                for key, value in payload.items():
                    existing[key] = self._transform(existing.get(key), value)
            else:
                document = dict(existing) if (merge and existing is not None) else {}
                for key, value in payload.items():
                    document[key] = self._transform(document.get(key), value)
                collection[reference.id] = document
        self._collections = staged


# =====================================================================================
# Storage 대역
# =====================================================================================

class FakeBlob:
    def __init__(self, bucket, name):
        self._bucket = bucket
        self.name = name

    def upload_from_string(self, data, content_type=None, **kwargs):
        if self._bucket.upload_error is not None:
            raise self._bucket.upload_error
        self._bucket.objects[self.name] = {"data": data, "content_type": content_type}

    def make_public(self, **kwargs):
        self._bucket.public.add(self.name)

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self._bucket.name}/{self.name}"

    def exists(self, **kwargs):
        return self.name in self._bucket.objects

    def delete(self, **kwargs):
        self._bucket.objects.pop(self.name)


class FakeBucket:
    def __init__(self, name="taskboard-test.appspot.com"):
        self.name = name
        self.objects = {}
        self.public = set()
        self.upload_error = None

    def blob(self, blob_name):
        return FakeBlob(self, blob_name)


# =====================================================================================
# 픽스처
# =====================================================================================

@pytest.fixture(autouse=True)
def fake_transactional(monkeypatch):
    """firestore.transactional을 대역 트랜잭션을 커밋하는 단순 실행기로 교체합니다."""
    def transactional(to_wrap):
        def run(transaction, *args, **kwargs):
            result = to_wrap(transaction, *args, **kwargs)
            transaction.commit()
            return result
        return run
    monkeypatch.setattr(firestore, "transactional", transactional)


@pytest.fixture
def db():
    client = FakeFirestoreClient()
    client.seed('users', 'user-a', {
        'user_id': 'user-a', 'nickname': 'alice', 'profile_image_url': 'https://img.example.com/alice.png',
        'email': 'alice@example.com', 'password_hash': 'secret-a', 'posts': [], 'bookmarks': []
    })
    client.seed('users', 'user-b', {
        'user_id': 'user-b', 'nickname': 'bob', 'profile_image_url': None,
        'email': 'bob@example.com', 'password_hash': 'secret-b', 'posts': [], 'bookmarks': []
    })
    return client


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def app(db, bucket):
    return create_app('testing', db=db, bucket=bucket)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.services


@pytest.fixture
def auth_headers(app):
    """사용자 ID로 Bearer 토큰 헤더를 만들어주는 함수를 반환합니다."""
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_image():
    """지정한 크기의 이미지 바이트를 만들어주는 함수를 반환합니다."""
    def _make(width, height, fmt="PNG", mode="RGB"):
        buffer = io.BytesIO()
        Image.new(mode, (width, height), color=(200, 80, 40) if mode == "RGB" else None).save(buffer, format=fmt)
        return buffer.getvalue()
    return _make


@pytest.fixture
def sample_post_fields():
    return {
        "title": "Need a ride",
        "description": "Airport to downtown",
        "category": "Transport",
        "location": "Springfield",
    }
