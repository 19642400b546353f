"""Pytest fixtures: in-memory stand-ins for the DynamoDB resource and S3 client.

The services take their boto3 handles through their constructors, so tests
build a ``DocumentStore`` and ``BlobStorage`` around these fakes instead of
talking to AWS. Only the calls the package actually makes are implemented.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from storefront_admin.core.config import AppConfig, COLLECTION_KEYS
from storefront_admin.data.blob_storage import BlobStorage
from storefront_admin.data.document_store import DocumentStore

NOW = datetime(2026, 5, 15, 12, 0, tzinfo=timezone.utc)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({'Error': {'Code': code, 'Message': f'{code} (fake)'}}, operation)


class FakeTable:
    """Insertion-ordered item map with paginated scans."""

    def __init__(self, name: str, key: str, page_size: int = 100):
        self.name = name
        self.key = key
        self.page_size = page_size
        self.items = {}
        self.scan_calls = 0
        self.fail_with = None

    def _check(self, operation: str) -> None:
        if self.fail_with:
            raise client_error(self.fail_with, operation)

    def scan(self, ExclusiveStartKey=None):
        self._check('Scan')
        self.scan_calls += 1
        keys = list(self.items)
        start = 0
        if ExclusiveStartKey is not None:
            start = keys.index(ExclusiveStartKey[self.key]) + 1
        page = keys[start:start + self.page_size]
        response = {'Items': [dict(self.items[k]) for k in page]}
        if start + self.page_size < len(keys):
            response['LastEvaluatedKey'] = {self.key: page[-1]}
        return response

    def get_item(self, Key):
        self._check('GetItem')
        item = self.items.get(Key[self.key])
        return {'Item': dict(item)} if item is not None else {}

    def put_item(self, Item):
        self._check('PutItem')
        self.items[Item[self.key]] = dict(Item)
        return {}

    def update_item(self, Key, UpdateExpression, ExpressionAttributeNames,
                    ExpressionAttributeValues, ConditionExpression=None):
        self._check('UpdateItem')
        key = Key[self.key]
        if ConditionExpression == 'attribute_exists(#key)' and key not in self.items:
            raise client_error('ConditionalCheckFailedException', 'UpdateItem')

        item = self.items.setdefault(key, {self.key: key})
        for name, value in re.findall(r'(#k\d+) = (:v\d+)', UpdateExpression):
            item[ExpressionAttributeNames[name]] = ExpressionAttributeValues[value]
        return {}

    def delete_item(self, Key):
        self._check('DeleteItem')
        self.items.pop(Key[self.key], None)
        return {}


class FakeDynamoDB:
    """Mimics ``boto3.resource('dynamodb')``: one table per name."""

    def __init__(self, prefix: str = 'test'):
        self.prefix = prefix
        self.tables = {}

    def Table(self, name: str) -> FakeTable:
        if name not in self.tables:
            collection = name[len(self.prefix) + 1:]
            self.tables[name] = FakeTable(name, COLLECTION_KEYS.get(collection, 'id'))
        return self.tables[name]

    def table(self, collection: str) -> FakeTable:
        return self.Table(f'{self.prefix}-{collection}')


class FakeS3:
    """Mimics the handful of S3 client calls used for product images."""

    def __init__(self, page_size: int = 1000):
        self.objects = {}
        self.page_size = page_size
        self.fail_with = None

    def _check(self, operation: str) -> None:
        if self.fail_with:
            raise client_error(self.fail_with, operation)

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None, Callback=None):
        self._check('PutObject')
        data = Fileobj.read()
        self.objects[Key] = {
            'Body': data,
            'ContentType': (ExtraArgs or {}).get('ContentType'),
        }
        if Callback is not None:
            # Two chunks, as the transfer manager reports partial progress
            half = len(data) // 2
            Callback(half)
            Callback(len(data) - half)

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?Expires={ExpiresIn}"

    def delete_object(self, Bucket, Key):
        self._check('DeleteObject')
        self.objects.pop(Key, None)
        return {}

    def list_objects_v2(self, Bucket, Prefix='', Delimiter=None, MaxKeys=None,
                        ContinuationToken=None):
        self._check('ListObjectsV2')
        keys = sorted(
            k for k in self.objects
            if k.startswith(Prefix) and not (Delimiter and Delimiter in k[len(Prefix):])
        )
        start = int(ContinuationToken or 0)
        size = MaxKeys or self.page_size
        page = keys[start:start + size]
        response = {'Contents': [{'Key': k} for k in page], 'IsTruncated': start + size < len(keys)}
        if response['IsTruncated']:
            response['NextContinuationToken'] = str(start + size)
        return response


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(s3_bucket='test-bucket', table_prefix='test', live_poll_interval=0.01)


@pytest.fixture
def dynamodb() -> FakeDynamoDB:
    return FakeDynamoDB('test')


@pytest.fixture
def store(config, dynamodb):
    store = DocumentStore(config, dynamodb=dynamodb)
    yield store
    store.close()


@pytest.fixture
def s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def storage(config, s3) -> BlobStorage:
    return BlobStorage(config, s3_client=s3)


@pytest.fixture
def seed(store):
    """Write raw documents into a collection: seed(collection, {id: doc, ...})."""
    def _seed(collection, documents):
        for doc_id, document in documents.items():
            store.set_document(collection, doc_id, document)
    return _seed
