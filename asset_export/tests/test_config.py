"""Tests for configuration classes and storage selection."""

import pytest

from asset_export.db_config import DbConfig
from asset_export.export_settings import ExportSettings
from asset_export.local_client import LocalClient
from asset_export.s3_client import S3Client
from asset_export.s3_config import S3Config
from asset_export.storage_factory import create_storage_client, storage_client_from_env


class TestS3Config:
    """Tests for S3Config."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('S3_ENDPOINT', 'https://minio:9000')
        monkeypatch.setenv('S3_BUCKET', 'assets')
        monkeypatch.setenv('S3_PREFIX', 'designs')
        monkeypatch.setenv('S3_ACCESS_KEY', 'key')
        monkeypatch.setenv('S3_SECRET_KEY', 'secret')
        monkeypatch.setenv('S3_VERIFY_SSL', 'false')

        config = S3Config.from_env()

        assert config.endpoint == 'https://minio:9000'
        assert config.bucket == 'assets'
        assert config.prefix == 'designs'
        assert config.verify_ssl is False
        assert config.validate() == []

    def test_validate_missing(self):
        errors = S3Config().validate()

        assert len(errors) == 4
        assert "S3_BUCKET is not set" in errors

    def test_public_base_url(self):
        assert S3Config(endpoint='https://minio:9000/', bucket='assets').public_base_url == (
            'https://minio:9000/assets'
        )
        assert S3Config(public_url='https://cdn.example.com/').public_base_url == 'https://cdn.example.com'


class TestDbConfig:
    """Tests for DbConfig."""

    def test_defaults(self, monkeypatch):
        for name in ('SQL_HOST', 'SQL_PORT', 'SQL_DATABASE', 'SQL_POOL_SIZE'):
            monkeypatch.delenv(name, raising=False)

        config = DbConfig.from_env()

        assert (config.host, config.port, config.database) == ('localhost', 3306, 'design_assets')
        assert config.validate() == []

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('SQL_HOST', 'mysql')
        monkeypatch.setenv('SQL_PORT', '3307')
        monkeypatch.setenv('SQL_POOL_SIZE', '8')

        config = DbConfig.from_env()

        assert (config.host, config.port, config.pool_size) == ('mysql', 3307, 8)

    def test_validate(self):
        errors = DbConfig(host='', pool_size=0).validate()

        assert "SQL_HOST is not set" in errors
        assert len(errors) == 2


class TestExportSettings:
    """Tests for ExportSettings."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('EXPORT_PREFIX', 'exports')
        monkeypatch.setenv('EXPORT_FETCH_TIMEOUT', '2.5')
        monkeypatch.setenv('EXPORT_MAX_SURFACE_PIXELS', '1000')
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

        settings = ExportSettings.from_env()

        assert settings.key_prefix == 'exports'
        assert settings.fetch_timeout == 2.5
        assert settings.max_surface_pixels == 1000
        assert settings.log_level == 'DEBUG'

    def test_defaults(self):
        settings = ExportSettings()

        assert settings.key_prefix == 'exported-assets'
        assert settings.fetch_timeout == 30.0


class TestStorageFactory:
    """Tests for storage client selection."""

    def test_local(self, tmp_path, logger):
        client = create_storage_client(local_root=str(tmp_path), local_prefix='x', logger=logger)

        assert isinstance(client, LocalClient)
        assert client.config.prefix == 'x'

    def test_local_invalid(self, tmp_path, logger):
        with pytest.raises(ValueError):
            create_storage_client(local_root=str(tmp_path / 'missing'), logger=logger)

    def test_s3(self, s3_config, mock_boto3_client, logger):
        assert isinstance(create_storage_client(s3_config=s3_config, logger=logger), S3Client)

    def test_s3_invalid(self, logger):
        with pytest.raises(ValueError, match='S3Client'):
            create_storage_client(s3_config=S3Config(), logger=logger)

    def test_from_env_local(self, monkeypatch, tmp_path):
        monkeypatch.setenv('LOCAL_STORAGE_ROOT', str(tmp_path))
        monkeypatch.setenv('LOCAL_STORAGE_PUBLIC_URL', 'https://cdn.example.com')

        client = storage_client_from_env()

        assert isinstance(client, LocalClient)
        assert client.get_public_url('a.png') == 'https://cdn.example.com/a.png'
