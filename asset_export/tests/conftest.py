"""
Pytest fixtures for asset_export tests.
"""

import io
import logging
import os
import uuid
from datetime import datetime, timedelta

import pytest
from PIL import Image


class FakeAssetDb:
    """In-memory stand-in for AssetDb with the same interface."""

    def __init__(self, design_files=None):
        self.design_files = dict(design_files or {})
        self.rows = {}
        self.fail_insert = None
        self._clock = datetime(2026, 1, 1, 12, 0, 0)

    def get_project_id_for_design_file(self, design_file_id):
        return self.design_files.get(design_file_id)

    def insert_asset(self, design_file_id, project_id, name, export_format, scale,
                     width, height, file_size, file_url, created_by):
        from asset_export.exported_asset import ExportedAsset

        if self.fail_insert is not None:
            raise self.fail_insert
        self._clock += timedelta(seconds=1)
        asset = ExportedAsset(
            id=str(uuid.uuid4()),
            design_file_id=design_file_id,
            project_id=project_id,
            name=name,
            format=export_format,
            scale=scale,
            width=width,
            height=height,
            file_size_bytes=file_size,
            file_url=file_url,
            created_by=created_by,
            created_at=self._clock,
        )
        self.rows[asset.id] = asset
        return asset

    def get_asset(self, asset_id):
        return self.rows.get(asset_id)

    def get_assets(self, asset_ids):
        return [self.rows[asset_id] for asset_id in asset_ids if asset_id in self.rows]

    def list_by_design_file(self, design_file_id):
        assets = [a for a in self.rows.values() if a.design_file_id == design_file_id]
        return sorted(assets, key=lambda a: a.created_at, reverse=True)

    def list_by_project(self, project_id):
        assets = [a for a in self.rows.values() if a.project_id == project_id]
        return sorted(assets, key=lambda a: a.created_at, reverse=True)

    def delete_asset(self, asset_id):
        return self.rows.pop(asset_id, None) is not None


def make_image_bytes(size=(800, 600), mode='RGB', color=(200, 30, 30), fmt='PNG'):
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def noise_image():
    """Fixture providing a factory of incompressible RGB images."""
    def make(size=(400, 300)):
        return Image.frombytes('RGB', size, os.urandom(size[0] * size[1] * 3))
    return make


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    return logging.getLogger('test')


@pytest.fixture
def sample_png_bytes():
    """Fixture providing 800x600 PNG bytes."""
    return make_image_bytes()


@pytest.fixture
def sample_rgba_png_bytes():
    """Fixture providing a semi-transparent 100x100 PNG."""
    return make_image_bytes(size=(100, 100), mode='RGBA', color=(255, 0, 0, 128))


@pytest.fixture
def source_png_path(tmp_path, sample_png_bytes):
    """Fixture providing an 800x600 PNG on disk."""
    path = tmp_path / 'source.png'
    path.write_bytes(sample_png_bytes)
    return str(path)


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / 'storage'
    root.mkdir()
    return root


@pytest.fixture
def local_storage(storage_root, logger):
    """Fixture providing a LocalClient served from a public base URL."""
    from asset_export.local_client import LocalClient, LocalConfig

    return LocalClient(
        LocalConfig(
            root_path=str(storage_root),
            prefix='assets',
            public_base_url='https://cdn.example.com/files',
        ),
        logger,
    )


@pytest.fixture
def fake_db():
    """Fixture providing an in-memory asset db with one design file."""
    return FakeAssetDb(design_files={'design-1': 'project-1'})


@pytest.fixture
def export_service(local_storage, fake_db, logger):
    """Fixture providing an export service over local storage and a fake db."""
    from asset_export.export_service import AssetExportService

    return AssetExportService(
        storage=local_storage,
        asset_db=fake_db,
        clock=lambda: 1700000000.5,
        logger=logger,
    )


@pytest.fixture
def s3_config():
    """Fixture providing S3 configuration."""
    from asset_export.s3_config import S3Config

    return S3Config(
        endpoint='https://test-endpoint.example.com:9000',
        bucket='test-bucket',
        prefix='designs',
        access_key='test-access-key',
        secret_key='test-secret-key',
        region='us-east-1',
    )


@pytest.fixture
def mock_boto3_client(mocker):
    """Fixture providing a mocked boto3 client."""
    mock_client = mocker.MagicMock()
    mocker.patch('asset_export.s3_client.boto3.client', return_value=mock_client)
    return mock_client
