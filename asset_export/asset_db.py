"""
AssetDb - MySQL metadata store for exported assets.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Iterable, List, Optional

import mysql.connector
from mysql.connector import pooling
from retrying import retry

from .db_config import DbConfig
from .exceptions import MetadataPersistError, MetadataQueryError
from .exported_asset import ExportedAsset

ASSET_COLUMNS = (
    "id, design_file_id, project_id, name, format, scale, width, height, "
    "file_size, file_url, created_by, created_at"
)

TABLES = {
    'exported_assets': (
        "CREATE TABLE IF NOT EXISTS `exported_assets` ("
        "  id CHAR(36) NOT NULL PRIMARY KEY,"
        "  design_file_id CHAR(36) NOT NULL,"
        "  project_id CHAR(36) NOT NULL,"
        "  name VARCHAR(255) NOT NULL,"
        "  format VARCHAR(10) NOT NULL,"
        "  scale DECIMAL(3,1) NOT NULL DEFAULT 1,"
        "  width INT NOT NULL,"
        "  height INT NOT NULL,"
        "  file_size INT NOT NULL,"
        "  file_url VARCHAR(2000) NOT NULL,"
        "  created_by CHAR(36),"
        "  created_at DATETIME(3) NOT NULL DEFAULT CURRENT_TIMESTAMP(3),"
        "  KEY idx_exported_assets_design_file (design_file_id, created_at),"
        "  KEY idx_exported_assets_project (project_id, created_at),"
        "  CONSTRAINT exported_assets_design_file_id_fkey"
        "    FOREIGN KEY (design_file_id) REFERENCES design_files (id) ON DELETE CASCADE,"
        "  CONSTRAINT exported_assets_project_id_fkey"
        "    FOREIGN KEY (project_id) REFERENCES projects (id) ON DELETE CASCADE"
        ") ENGINE=InnoDB"
    )
}


class AssetDb:
    """
    Reads and writes exported_assets rows and resolves design files.

    The connection pool is created lazily on first use.
    """

    def __init__(self, config: DbConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.connection_pool = None

    def initialize_pool(self):
        """Initialize the connection pool if it hasn't been created yet."""
        if not self.connection_pool:
            self.logger.debug("Initializing connection pool...")
            self.connection_pool = pooling.MySQLConnectionPool(
                pool_name="asset_db_pool",
                pool_size=self.config.pool_size,
                user=self.config.user,
                password=self.config.password,
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
            )
            self.logger.debug("Connection pool initialized.")

    @retry(retry_on_exception=lambda e: isinstance(e, mysql.connector.Error),
           stop_max_attempt_number=3, wait_exponential_multiplier=1000)
    def get_cursor(self):
        """Get a connection from the pool and create a dictionary cursor."""
        self.initialize_pool()
        connection = self.connection_pool.get_connection()
        return connection.cursor(dictionary=True, buffered=True), connection

    @contextmanager
    def cursor(self):
        """Yield (cursor, connection), returning the connection to the pool afterwards."""
        cursor, connection = self.get_cursor()
        try:
            yield cursor, connection
        finally:
            cursor.close()
            self.close_connection(connection)

    def close_connection(self, connection):
        """Return a connection to the pool."""
        try:
            connection.close()
        except mysql.connector.Error as e:
            self.logger.warning(f"Error closing connection: {e}")

    def create_tables(self) -> None:
        """Create the exported_assets table if it does not exist."""
        try:
            with self.cursor() as (cursor, connection):
                for table_name, table_description in TABLES.items():
                    self.logger.info(f"Creating table {table_name}...")
                    cursor.execute(table_description)
                connection.commit()
        except mysql.connector.Error as e:
            raise MetadataPersistError(f"Failed to create tables: {e}") from e

    def get_project_id_for_design_file(self, design_file_id: str) -> Optional[str]:
        """Return the project owning a design file, or None if it doesn't exist."""
        rows = self._query(
            "SELECT project_id FROM design_files WHERE id = %s",
            (design_file_id,),
            "Failed to look up design file"
        )
        return rows[0]['project_id'] if rows else None

    def insert_asset(
        self,
        design_file_id: str,
        project_id: str,
        name: str,
        export_format: str,
        scale: float,
        width: int,
        height: int,
        file_size: int,
        file_url: str,
        created_by: Optional[str]
    ) -> ExportedAsset:
        """
        Insert a metadata row and return it as stored.

        Raises:
            MetadataPersistError: if the insert or the read-back fails
        """
        asset_id = str(uuid.uuid4())
        insert = (
            "INSERT INTO exported_assets "
            "(id, design_file_id, project_id, name, format, scale, width, height, "
            "file_size, file_url, created_by) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)"
        )
        params = (asset_id, design_file_id, project_id, name, export_format, scale,
                  width, height, file_size, file_url, created_by)
        try:
            with self.cursor() as (cursor, connection):
                self.logger.debug(f"Inserting asset record {asset_id}")
                # Insert and read-back commit together or not at all
                try:
                    cursor.execute(insert, params)
                    cursor.execute(
                        f"SELECT {ASSET_COLUMNS} FROM exported_assets WHERE id = %s",
                        (asset_id,)
                    )
                    row = cursor.fetchone()
                    if row is None:
                        raise MetadataPersistError(
                            f"Inserted asset record {asset_id} could not be read back"
                        )
                    connection.commit()
                except (mysql.connector.Error, MetadataPersistError):
                    connection.rollback()
                    raise
        except mysql.connector.Error as e:
            raise MetadataPersistError(f"Failed to insert asset record: {e}") from e

        return ExportedAsset.from_row(row)

    def get_asset(self, asset_id: str) -> Optional[ExportedAsset]:
        """Fetch one asset, or None if it does not exist."""
        rows = self._query(
            f"SELECT {ASSET_COLUMNS} FROM exported_assets WHERE id = %s",
            (asset_id,),
            "Failed to fetch asset"
        )
        return ExportedAsset.from_row(rows[0]) if rows else None

    def get_assets(self, asset_ids: Iterable[str]) -> List[ExportedAsset]:
        """Fetch several assets; missing ids are simply absent from the result."""
        asset_ids = list(asset_ids)
        if not asset_ids:
            return []
        placeholders = ', '.join(['%s'] * len(asset_ids))
        rows = self._query(
            f"SELECT {ASSET_COLUMNS} FROM exported_assets WHERE id IN ({placeholders})",
            tuple(asset_ids),
            "Failed to fetch assets"
        )
        return [ExportedAsset.from_row(row) for row in rows]

    def list_by_design_file(self, design_file_id: str) -> List[ExportedAsset]:
        """Assets exported from a design file, newest first."""
        rows = self._query(
            f"SELECT {ASSET_COLUMNS} FROM exported_assets "
            "WHERE design_file_id = %s ORDER BY created_at DESC",
            (design_file_id,),
            "Failed to fetch exported assets"
        )
        return [ExportedAsset.from_row(row) for row in rows]

    def list_by_project(self, project_id: str) -> List[ExportedAsset]:
        """Assets exported within a project, newest first."""
        rows = self._query(
            f"SELECT {ASSET_COLUMNS} FROM exported_assets "
            "WHERE project_id = %s ORDER BY created_at DESC",
            (project_id,),
            "Failed to fetch project assets"
        )
        return [ExportedAsset.from_row(row) for row in rows]

    def delete_asset(self, asset_id: str) -> bool:
        """
        Delete a metadata row.

        Returns:
            True if a row was deleted
        """
        try:
            with self.cursor() as (cursor, connection):
                self.logger.debug(f"Deleting asset record {asset_id}")
                cursor.execute("DELETE FROM exported_assets WHERE id = %s", (asset_id,))
                connection.commit()
                return cursor.rowcount > 0
        except mysql.connector.Error as e:
            raise MetadataPersistError(f"Failed to delete asset record {asset_id}: {e}") from e

    def _query(self, sql: str, params: tuple, error_message: str) -> List[dict]:
        try:
            with self.cursor() as (cursor, connection):
                cursor.execute(sql, params)
                return cursor.fetchall()
        except mysql.connector.Error as e:
            raise MetadataQueryError(f"{error_message}: {e}") from e
