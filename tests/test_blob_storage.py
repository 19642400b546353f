import io

import pytest

from storefront_admin.core.config import AppConfig
from storefront_admin.core.exceptions import BlobStorageError
from storefront_admin.data.blob_storage import (
    BlobStorage,
    get_file_extension,
    validate_file_size,
    validate_file_type,
)


@pytest.mark.parametrize('filename, expected', [
    ('photo.png', 'png'),
    ('archive.tar.gz', 'gz'),
    ('README', ''),
    ('.env', ''),
])
def test_get_file_extension(filename, expected):
    assert get_file_extension(filename) == expected


def test_validators():
    assert validate_file_type('image/png', ['image/png', 'image/jpeg'])
    assert not validate_file_type('application/pdf', ['image/png'])
    assert validate_file_size(5 * 1024 * 1024, 5)
    assert not validate_file_size(5 * 1024 * 1024 + 1, 5)


def test_upload_returns_presigned_url(storage, s3, config):
    url = storage.upload_file(io.BytesIO(b'abc'), 'products/shoe.png', content_type='image/png')

    assert s3.objects['products/shoe.png'] == {'Body': b'abc', 'ContentType': 'image/png'}
    assert url == (
        f'https://test-bucket.s3.amazonaws.com/products/shoe.png?Expires={config.presigned_url_expiry}'
    )


def test_upload_reports_progress(storage):
    progress = []
    storage.upload_file(io.BytesIO(b'x' * 10), 'products/a.png', on_progress=progress.append)
    assert progress == [50.0, 100.0]


def test_upload_multiple_files_keeps_order(storage, s3):
    seen = {}
    files = [(f'img{i}.png', io.BytesIO(b'data' * (i + 1))) for i in range(4)]

    urls = storage.upload_multiple_files(
        files, 'products', on_progress=lambda index, pct: seen.setdefault(index, []).append(pct)
    )

    assert [u.split('?')[0].rsplit('/', 1)[-1] for u in urls] == [f'img{i}.png' for i in range(4)]
    assert sorted(s3.objects) == [f'products/img{i}.png' for i in range(4)]
    assert all(values[-1] == 100.0 for values in seen.values())


def test_delete_file(storage, s3):
    storage.upload_file(io.BytesIO(b'abc'), 'products/shoe.png')
    storage.delete_file('products/shoe.png')
    assert s3.objects == {}


def test_list_files_is_one_level_and_paginated(storage, s3):
    for name in ['a.png', 'b.png', 'c.png', 'nested/d.png']:
        storage.upload_file(io.BytesIO(b'1'), f'products/{name}')
    storage.upload_file(io.BytesIO(b'1'), 'other/e.png')
    s3.page_size = 2

    files = storage.list_files('products')

    assert [f['name'] for f in files] == ['a.png', 'b.png', 'c.png']
    assert files[0]['full_path'] == 'products/a.png'
    assert files[0]['download_url'].startswith('https://test-bucket.s3.amazonaws.com/products/a.png')


def test_client_errors_become_blob_storage_errors(storage, s3):
    s3.fail_with = 'AccessDenied'

    with pytest.raises(BlobStorageError) as excinfo:
        storage.upload_file(io.BytesIO(b'abc'), 'products/shoe.png')
    assert excinfo.value.path == 'products/shoe.png'


def test_unconfigured_bucket():
    storage = BlobStorage(AppConfig(s3_bucket=None))

    assert not storage.is_configured()
    assert storage.test_connection() == (False, 'No bucket_name configured')
    with pytest.raises(BlobStorageError):
        storage.upload_file(io.BytesIO(b'abc'), 'products/shoe.png')


def test_connection_check(storage, s3):
    assert storage.test_connection() == (True, 'Connected to bucket: test-bucket')
    s3.fail_with = 'NoSuchBucket'
    ok, message = storage.test_connection()
    assert not ok
    assert 'NoSuchBucket' in message
