"""
pytest configuration and fixtures for sql2struct tests.
"""
import logging
import textwrap

import pytest

from sql2struct import parse_sql


USER_INFO_DDL = textwrap.dedent("""\
    CREATE TABLE shard.user_info_{region} (
      `fid` BIGINT NOT NULL AUTO_INCREMENT COMMENT 'primary key',
      `fuser_name` VARCHAR(64) NOT NULL COMMENT 'user name',
      `fnickname` VARCHAR(32) DEFAULT NULL COMMENT 'nickname',
      `fid_card` TEXT NOT NULL /* 加密 */ COMMENT 'id card',
      `fage` INT NULL COMMENT 'age',
      `fbalance` DOUBLE NOT NULL DEFAULT '0' COMMENT 'balance',
      `fcreated_at` DATETIME DEFAULT NULL COMMENT 'created time',
      `fupdated_at` DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP COMMENT 'updated time',
      PRIMARY KEY (`fid`),
      KEY `idx_user_name` (`fuser_name`)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COMMENT='user info';
    """)


@pytest.fixture
def user_info_ddl() -> str:
    """A representative sharded table definition."""
    return USER_INFO_DDL


@pytest.fixture
def schema_file(tmp_path, user_info_ddl):
    """The sample table written to a .sql file."""
    path = tmp_path / "user_info.sql"
    path.write_text(user_info_ddl, encoding="utf-8")
    return path


@pytest.fixture
def context(user_info_ddl):
    """Parsed sample table with PO and entity names configured."""
    return parse_sql(user_info_ddl, struct_name="UserInfoPO", second_struct_name="UserInfo")


@pytest.fixture
def columns(context):
    """Sample columns keyed by SQL column name."""
    return {c.sql_name: c for c in context.columns}


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() calls made by a test (e.g. through the CLI)."""
    pkg_logger = logging.getLogger("sql2struct")
    handlers = pkg_logger.handlers[:]
    level = pkg_logger.level
    yield
    pkg_logger.handlers[:] = handlers
    pkg_logger.setLevel(level)
