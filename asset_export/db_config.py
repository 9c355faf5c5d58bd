"""
DbConfig - MySQL connection settings for the metadata store.
"""

import os
from dataclasses import dataclass
from typing import List


@dataclass
class DbConfig:
    """
    Metadata database configuration.

    Attributes:
        host: MySQL host
        port: MySQL port
        user: Database user
        password: Database password
        database: Schema name
        pool_size: Connection pool size
    """
    host: str = 'localhost'
    port: int = 3306
    user: str = 'root'
    password: str = ''
    database: str = 'design_assets'
    pool_size: int = 4

    @classmethod
    def from_env(cls) -> 'DbConfig':
        """Load configuration from SQL_* environment variables."""
        return cls(
            host=os.getenv('SQL_HOST', 'localhost'),
            port=int(os.getenv('SQL_PORT', '3306')),
            user=os.getenv('SQL_USER', 'root'),
            password=os.getenv('SQL_PASSWORD', ''),
            database=os.getenv('SQL_DATABASE', 'design_assets'),
            pool_size=int(os.getenv('SQL_POOL_SIZE', '4')),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not self.host:
            errors.append("SQL_HOST is not set")
        if not self.database:
            errors.append("SQL_DATABASE is not set")
        if self.pool_size < 1:
            errors.append(f"SQL_POOL_SIZE must be at least 1, got {self.pool_size}")
        return errors
