"""Tests for configuration loading and precedence."""

import argparse

import pytest
from pydantic import ValidationError

from coin_indexer.config import ENV_PREFIX, IndexerConfig, add_args, load_config


def _parse(argv):
    parser = argparse.ArgumentParser()
    add_args(parser)
    return parser.parse_args(argv)


class TestLoadConfig:

    def test_defaults(self):
        config = load_config(_parse([]), environ={})
        assert config == IndexerConfig()
        assert config.first_checkpoint == 0
        assert config.last_checkpoint is None
        assert not config.create_schema

    def test_cli_values(self):
        args = _parse([
            "--indexer.database_url", "postgresql+asyncpg://u:p@db/indexer",
            "--indexer.first_checkpoint", "100",
            "--indexer.last_checkpoint", "200",
            "--indexer.concurrency", "8",
            "--indexer.poll_interval", "0.5",
            "--indexer.create_schema",
        ])
        config = load_config(args, environ={})
        assert config.database_url == "postgresql+asyncpg://u:p@db/indexer"
        assert config.first_checkpoint == 100
        assert config.last_checkpoint == 200
        assert config.concurrency == 8
        assert config.poll_interval_seconds == 0.5
        assert config.create_schema

    def test_env_overrides_cli(self):
        args = _parse(["--indexer.concurrency", "8", "--indexer.first_checkpoint", "5"])
        config = load_config(args, environ={
            f"{ENV_PREFIX}CONCURRENCY": "2",
            f"{ENV_PREFIX}CREATE_SCHEMA": "true",
            f"{ENV_PREFIX}LAST_CHECKPOINT": "",
        })
        assert config.concurrency == 2
        assert config.first_checkpoint == 5
        assert config.create_schema
        assert config.last_checkpoint is None

    def test_invalid_values_rejected(self):
        with pytest.raises(ValidationError):
            load_config(None, environ={f"{ENV_PREFIX}CONCURRENCY": "0"})
        with pytest.raises(ValidationError):
            load_config(_parse(["--indexer.first_checkpoint", "-1"]), environ={})

    def test_remote_source_detection(self):
        assert IndexerConfig(checkpoint_source="https://checkpoints.example/").source_is_remote
        assert not IndexerConfig(checkpoint_source="/var/lib/checkpoints").source_is_remote
