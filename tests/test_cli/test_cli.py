"""Tests for CLI commands."""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from imgdelivery.cli import _setup_logging, cli
from imgdelivery.config import hierarchy


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def root(tmp_path, monkeypatch):
    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.chdir(tmp_path)
    for key in hierarchy._ENV_MAP:
        monkeypatch.delenv(key, raising=False)
    cache_root = tmp_path / "cache"
    cache_root.mkdir()
    return cache_root


@pytest.fixture
def image_file(tmp_path, sample_image_bytes):
    path = tmp_path / "upload.png"
    path.write_bytes(sample_image_bytes)
    return path


def _opts(root):
    return ["--root", str(root), "--base-url", "http://example.com/cache"]


class TestCLIGroup:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "imgdelivery" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0


class TestPathCommand:
    def test_prints_stem(self, runner, root):
        result = runner.invoke(cli, ["path", "user:42", "resize:100x100", *_opts(root)])
        assert result.exit_code == 0
        stem = result.output.strip()
        assert stem[1] == "/"
        assert len(stem.split("/")[1]) == 10

    def test_missing_root(self, runner, tmp_path):
        result = runner.invoke(cli, ["path", "user:42", "--root", str(tmp_path / "missing")])
        assert result.exit_code == 1


class TestPutExistsGetClear:
    def test_full_cycle(self, runner, root, image_file, tmp_path):
        args = ["user:42", "resize:100x100", *_opts(root)]

        result = runner.invoke(cli, ["exists", *args])
        assert result.exit_code == 1

        result = runner.invoke(cli, ["put", str(image_file), *args])
        assert result.exit_code == 0
        assert result.output.strip().startswith("http://example.com/cache/")
        assert result.output.strip().endswith(".png")

        result = runner.invoke(cli, ["exists", *args])
        assert result.exit_code == 0
        assert ".png" in result.output

        out = tmp_path / "out.png"
        result = runner.invoke(cli, ["get", *args, "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_bytes() == image_file.read_bytes()

        result = runner.invoke(cli, ["clear", *args])
        assert result.exit_code == 0
        assert "cleared" in result.output.lower()

        result = runner.invoke(cli, ["exists", *args])
        assert result.exit_code == 1

    def test_get_missing(self, runner, root, tmp_path):
        result = runner.invoke(cli, ["get", "user:1", "-o", str(tmp_path / "x.png"), *_opts(root)])
        assert result.exit_code == 1
        assert not (tmp_path / "x.png").exists()

    def test_put_rejects_non_image(self, runner, root, tmp_path):
        bogus = tmp_path / "bogus.png"
        bogus.write_bytes(b"not an image")
        result = runner.invoke(cli, ["put", str(bogus), "user:1", *_opts(root)])
        assert result.exit_code == 1

    def test_put_rejects_undeclared_format(self, runner, root, image_file):
        result = runner.invoke(cli, ["put", str(image_file), "user:1", "--format", "jpg", *_opts(root)])
        assert result.exit_code == 1

    def test_clear_absent_succeeds(self, runner, root):
        result = runner.invoke(cli, ["clear", "user:404", *_opts(root)])
        assert result.exit_code == 0


class TestStatsCommand:
    def test_empty_cache(self, runner, root):
        result = runner.invoke(cli, ["stats", *_opts(root)])
        assert result.exit_code == 0
        assert "Cache Statistics" in result.output

    def test_counts_entries(self, runner, root, image_file):
        runner.invoke(cli, ["put", str(image_file), "user:1", *_opts(root)])
        runner.invoke(cli, ["put", str(image_file), "user:2", *_opts(root)])
        result = runner.invoke(cli, ["stats", *_opts(root)])
        assert result.exit_code == 0
        assert ".png" in result.output
        assert "2" in result.output


class TestInvalidArguments:
    def test_exists_empty_source(self, runner, root):
        result = runner.invoke(cli, ["exists", "", *_opts(root)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_path_empty_step(self, runner, root):
        result = runner.invoke(cli, ["path", "user:1", "", *_opts(root)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    @pytest.mark.parametrize("command", ["get", "clear"])
    def test_other_commands_empty_source(self, runner, root, tmp_path, command):
        extra = ["-o", str(tmp_path / "x.png")] if command == "get" else []
        result = runner.invoke(cli, [command, "", *extra, *_opts(root)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)

    def test_put_empty_step(self, runner, root, image_file):
        result = runner.invoke(cli, ["put", str(image_file), "user:1", "", *_opts(root)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert not any(p.is_file() for p in root.rglob("*"))

    def test_format_with_separator(self, runner, root):
        result = runner.invoke(cli, ["path", "user:1", "--format", "png/x", *_opts(root)])
        assert result.exit_code == 1


class TestLogLevel:
    def test_configured_level_is_base(self):
        with patch("imgdelivery.cli.logging.basicConfig") as basic_config:
            _setup_logging(0, "error")
        assert basic_config.call_args.kwargs["level"] == logging.ERROR

    def test_verbose_lowers_configured_level(self):
        with patch("imgdelivery.cli.logging.basicConfig") as basic_config:
            _setup_logging(1, "ERROR")
        assert basic_config.call_args.kwargs["level"] == logging.INFO

    def test_verbose_keeps_lower_configured_level(self):
        with patch("imgdelivery.cli.logging.basicConfig") as basic_config:
            _setup_logging(1, "DEBUG")
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

    def test_unknown_level_falls_back_to_warning(self):
        with patch("imgdelivery.cli.logging.basicConfig") as basic_config:
            _setup_logging(0, "chatty")
        assert basic_config.call_args.kwargs["level"] == logging.WARNING

    def test_level_from_environment(self, runner, root, monkeypatch):
        monkeypatch.setenv("IMGDELIVERY_LOG_LEVEL", "DEBUG")
        with patch("imgdelivery.cli.logging.basicConfig") as basic_config:
            result = runner.invoke(cli, ["path", "user:1", *_opts(root)])
        assert result.exit_code == 0
        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
