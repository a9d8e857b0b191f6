"""
Unit tests for the command-line entry point.
"""

import json

import pytest

from contrib_archive import archive_cli

from conftest import make_contribution


@pytest.fixture
def cli_env(monkeypatch, tmp_path, client):
    """Isolate the CLI from the real environment and network."""
    monkeypatch.chdir(tmp_path)
    for name in ("CG_COOKIE", "CG_USER_ID", "DATA_DIR", "EXTRA_HANDLES", "TEST_HANDLES", "CG_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(archive_cli, "build_client", lambda settings: client)
    return monkeypatch


def set_credentials(monkeypatch):
    monkeypatch.setenv("CG_COOKIE", "session=abc")
    monkeypatch.setenv("CG_USER_ID", "4242")


class TestArchiveCli:
    """Tests for main() exit status and effects."""

    def test_missing_credentials_exit_before_any_write(self, cli_env, tmp_path):
        """Test that a config error exits 1 without touching the archive."""
        data_dir = tmp_path / "archive"

        code = archive_cli.main(["--data-dir", str(data_dir)])

        assert code == 1
        assert not data_dir.exists()

    def test_invalid_user_id(self, cli_env):
        cli_env.setenv("CG_COOKIE", "c")
        cli_env.setenv("CG_USER_ID", "not-a-number")

        assert archive_cli.main([]) == 1

    def test_successful_run(self, cli_env, service, tmp_path):
        """Test a full run writes snapshots and the index."""
        set_credentials(cli_env)
        service.add(make_contribution("h1"))
        data_dir = tmp_path / "archive"

        code = archive_cli.main(["--data-dir", str(data_dir)])

        assert code == 0
        assert len(list((data_dir / "contributions" / "h1").glob("*.json"))) == 1
        index = json.loads((data_dir / "index.json").read_text(encoding="utf-8"))
        assert list(index["contributions"]) == ["h1"]

    def test_data_dir_from_environment(self, cli_env, service, tmp_path):
        set_credentials(cli_env)
        cli_env.setenv("DATA_DIR", str(tmp_path / "from-env"))
        service.add(make_contribution("h1"))

        assert archive_cli.main([]) == 0
        assert (tmp_path / "from-env" / "index.json").exists()

    def test_test_handles_option(self, cli_env, service, tmp_path):
        """Test that --test-handles restricts the run."""
        set_credentials(cli_env)
        service.add(make_contribution("h1"))
        service.add(make_contribution("h2"))
        data_dir = tmp_path / "archive"

        code = archive_cli.main(["--data-dir", str(data_dir), "--test-handles", "h2"])

        assert code == 0
        assert not (data_dir / "contributions" / "h1").exists()
        assert (data_dir / "contributions" / "h2").exists()

    def test_list_failure_exits_nonzero(self, cli_env, service, tmp_path):
        """Test that a failing bulk list call is fatal."""
        set_credentials(cli_env)
        service.connector.fail_on("Contribution/getAllPendingContributions")

        assert archive_cli.main(["--data-dir", str(tmp_path / "archive")]) == 1

    def test_per_handle_failure_still_succeeds(self, cli_env, service, tmp_path):
        """Test that recoverable failures keep exit status 0."""
        set_credentials(cli_env)
        service.add(make_contribution("h1"))
        service.connector.fail_on("Contribution/findContribution")

        assert archive_cli.main(["--data-dir", str(tmp_path / "archive")]) == 0

    def test_index_only(self, cli_env, tmp_path):
        """Test that --index-only rebuilds the index without credentials."""
        data_dir = tmp_path / "archive"
        (data_dir / "comments" / "h9").mkdir(parents=True)
        (data_dir / "comments" / "h9" / "2024-01-01_00-00-00.json").write_text("[]")

        code = archive_cli.main(["--data-dir", str(data_dir), "--index-only"])

        assert code == 0
        index = json.loads((data_dir / "index.json").read_text(encoding="utf-8"))
        assert index["comments"] == {"h9": ["2024-01-01_00-00-00.json"]}

    def test_unwritable_data_dir(self, cli_env, tmp_path):
        """Test that an unusable archive root exits 1."""
        set_credentials(cli_env)
        blocker = tmp_path / "archive"
        blocker.write_text("file, not directory")

        assert archive_cli.main(["--data-dir", str(blocker)]) == 1

    def test_index_only_honours_pretty_print_setting(self, cli_env, tmp_path):
        """Test that --index-only writes compact JSON when pretty_print is off."""
        data_dir = tmp_path / "archive"
        (data_dir / "contributions" / "h1").mkdir(parents=True)
        config_file = tmp_path / "archive.yaml"
        config_file.write_text("storage:\n  pretty_print: false\n", encoding="utf-8")

        code = archive_cli.main(
            ["--config", str(config_file), "--data-dir", str(data_dir), "--index-only"]
        )

        assert code == 0
        text = (data_dir / "index.json").read_text(encoding="utf-8")
        assert text.count("\n") == 1
        assert json.loads(text) == {"contributions": {"h1": []}, "comments": {}}

    def test_corrupt_snapshot_exits_nonzero(self, cli_env, service, tmp_path):
        """Test that an unreadable archived snapshot ends the run with status 1."""
        set_credentials(cli_env)
        service.add(make_contribution("h1"))
        data_dir = tmp_path / "archive"
        handle_dir = data_dir / "contributions" / "h1"
        handle_dir.mkdir(parents=True)
        (handle_dir / "2024-01-01_00-00-00.json").write_text("{", encoding="utf-8")

        assert archive_cli.main(["--data-dir", str(data_dir)]) == 1
