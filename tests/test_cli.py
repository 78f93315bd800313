"""Tests for auto_versioner.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from conftest import RELEASE_OID, FakePullRequests, FakeTagStore
from auto_versioner.cli import DEFAULT_TAGGER_NAME, cli
from auto_versioner.models import Tag

COMMIT = "abcdef0123456789abcdef0123456789abcdef01"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """A pyproject.toml location with no [tool.auto-versioner] table."""
    return tmp_path / "pyproject.toml"


def invoke(runner: CliRunner, config_path: Path, *args: str, env: dict[str, str] | None = None):
    return runner.invoke(cli, ["--config", str(config_path), *args], env=env)


@patch("auto_versioner.cli.step")
@patch("auto_versioner.cli.setup_logging")
@patch("auto_versioner.cli.GitTagStore")
class TestCreateTag:
    """Tests for the create-tag command."""

    def test_creates_release_tag(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
        fake_store: FakeTagStore,
    ) -> None:
        mock_store_cls.return_value = fake_store

        result = invoke(
            runner, config_path,
            "create-tag", "--tag-mode", "release", "--bump", "minor",
            "--commit-sha", COMMIT, "--tag-prefix", "v",
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "v1.3.0"
        mock_store_cls.assert_called_once_with("origin")
        mock_logging.assert_called_once_with("terse")
        spec = fake_store.created[0]
        assert spec.commit == COMMIT
        assert spec.tagger_name == DEFAULT_TAGGER_NAME

    def test_env_overrides_option(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
        fake_store: FakeTagStore,
    ) -> None:
        mock_store_cls.return_value = fake_store

        result = invoke(
            runner, config_path,
            "create-tag", "--tag-mode", "release", "--bump", "patch", "--commit-sha", COMMIT,
            env={"AV_BUMP": "major", "AV_TAG_PREFIX": "v", "AV_REMOTE": "upstream"},
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "v2.0.0"
        mock_store_cls.assert_called_once_with("upstream")

    def test_reads_project_settings(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
        fake_store: FakeTagStore,
    ) -> None:
        mock_store_cls.return_value = fake_store
        config_path.write_text(
            '[tool.auto-versioner]\ntag-prefix = "v"\ntag-mode = "rc"\nlog-level = "verbose"\n'
        )

        result = invoke(runner, config_path, "create-tag", "--bump", "minor", "--commit-sha", COMMIT)

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "v1.3.0-rc.2"
        mock_logging.assert_called_once_with("verbose")

    def test_dry_run_creates_nothing(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
    ) -> None:
        store = FakeTagStore(
            [Tag(name="v1.2.3", object_id=RELEASE_OID), Tag(name="v1", object_id=RELEASE_OID)]
        )
        mock_store_cls.return_value = store

        result = invoke(
            runner, config_path,
            "create-tag", "--tag-mode", "release", "--bump", "patch",
            "--commit-sha", COMMIT, "--tag-prefix", "v", "--dry-run",
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "v1.2.4"
        assert store.calls == [("list", "")]

    def test_floating_tag_moved(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
    ) -> None:
        store = FakeTagStore(
            [Tag(name="v1.2.3", object_id=RELEASE_OID), Tag(name="v1", object_id=RELEASE_OID)]
        )
        mock_store_cls.return_value = store

        result = invoke(
            runner, config_path,
            "create-tag", "--tag-mode", "release", "--bump", "patch",
            "--commit-sha", COMMIT, "--tag-prefix", "v",
        )

        assert result.exit_code == 0, result.output
        assert store.calls[-2:] == [("delete", "v1"), ("create", "v1")]

    @pytest.mark.parametrize(
        ("args", "message"),
        [
            (["--bump", "minor", "--commit-sha", COMMIT], "tag-mode is required"),
            (["--tag-mode", "nightly", "--bump", "minor", "--commit-sha", COMMIT], "invalid tag mode"),
            (["--tag-mode", "release", "--bump", "huge", "--commit-sha", COMMIT], "invalid bump"),
            (["--tag-mode", "release", "--bump", "minor"], "commit-sha is required"),
        ],
    )
    def test_usage_errors(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
        args: list[str],
        message: str,
    ) -> None:
        result = invoke(runner, config_path, "create-tag", *args)

        assert result.exit_code == 2
        assert message in result.output
        mock_store_cls.return_value.list_tags.assert_not_called()

    def test_invalid_base_version_fails(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
    ) -> None:
        mock_store_cls.return_value = FakeTagStore()

        result = invoke(
            runner, config_path,
            "create-tag", "--tag-mode", "release", "--bump", "minor",
            "--commit-sha", COMMIT, "--base-version", "not-a-version",
        )

        assert result.exit_code == 1
        assert "invalid base version" in result.output

    def test_store_failure_fails(
        self,
        mock_store_cls: MagicMock,
        mock_logging: MagicMock,
        mock_step: MagicMock,
        runner: CliRunner,
        config_path: Path,
        fake_store: FakeTagStore,
    ) -> None:
        fake_store.fail_create.add("1.3.0")
        mock_store_cls.return_value = fake_store

        result = invoke(
            runner, config_path,
            "create-tag", "--tag-mode", "release", "--bump", "minor", "--commit-sha", COMMIT,
        )

        assert result.exit_code == 1
        assert "creating annotated tag 1.3.0: remote rejected" in result.output


@patch("auto_versioner.cli.setup_logging")
@patch("auto_versioner.cli.GitHubPullRequests")
class TestInferBump:
    """Tests for the infer-bump command."""

    def test_prints_inferred_bump(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        mock_pulls_cls.return_value = FakePullRequests({COMMIT: 5}, {5: ["semver-major"]})

        result = invoke(runner, config_path, "infer-bump", "--commit-sha", COMMIT)

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "major"

    def test_custom_label_from_env(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        mock_pulls_cls.return_value = FakePullRequests({COMMIT: 5}, {5: ["enhancement"]})

        result = invoke(
            runner, config_path, "infer-bump", env={"AV_COMMIT_SHA": COMMIT, "AV_LABEL_MINOR": "enhancement"}
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "minor"

    def test_defaults_to_patch(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        mock_pulls_cls.return_value = FakePullRequests()

        result = invoke(runner, config_path, "infer-bump", "--commit-sha", COMMIT)

        assert result.exit_code == 0, result.output
        assert result.output.strip() == "patch"

    def test_strict_fails_without_pull_request(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        mock_pulls_cls.return_value = FakePullRequests()

        result = invoke(runner, config_path, "infer-bump", "--commit-sha", COMMIT, "--strict")

        assert result.exit_code == 1
        assert "no pull request" in result.output


@patch("auto_versioner.cli.setup_logging")
@patch("auto_versioner.cli.GitHubPullRequests")
class TestPRLabel:
    """Tests for the pr-label command."""

    def test_adds_label_for_branch(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        pulls = FakePullRequests()
        mock_pulls_cls.return_value = pulls

        result = invoke(runner, config_path, "pr-label", "--pr-id", "12", "--source-branch", "breaking/api")

        assert result.exit_code == 0, result.output
        assert pulls.added == [(12, "semver-major")]

    def test_branch_prefix_option(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        pulls = FakePullRequests()
        mock_pulls_cls.return_value = pulls

        result = runner.invoke(
            cli,
            [
                "--config", str(config_path), "--branch-minor-prefix", "feat/",
                "pr-label", "--pr-id", "3", "--source-branch", "feat/x",
            ],
        )

        assert result.exit_code == 0, result.output
        assert pulls.added == [(3, "semver-minor")]

    def test_conflict_leaves_labels(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        pulls = FakePullRequests(labels={3: ["semver-major"]})
        mock_pulls_cls.return_value = pulls

        result = invoke(runner, config_path, "pr-label", "--pr-id", "3", "--source-branch", "fix/x")

        assert result.exit_code == 0, result.output
        assert pulls.added == []

    def test_rejects_non_positive_pr(
        self, mock_pulls_cls: MagicMock, mock_logging: MagicMock, runner: CliRunner, config_path: Path
    ) -> None:
        result = invoke(runner, config_path, "pr-label", "--pr-id", "0", "--source-branch", "fix/x")

        assert result.exit_code == 2
        assert "pr-id must be greater than zero" in result.output


@patch("auto_versioner.cli.setup_logging")
def test_version_command(mock_logging: MagicMock, runner: CliRunner, config_path: Path) -> None:
    with patch("auto_versioner.cli.__version__", "9.9.9"):
        result = invoke(runner, config_path, "version")

    assert result.exit_code == 0
    assert result.output.strip() == "auto-versioner 9.9.9"


def test_unknown_log_level(runner: CliRunner, config_path: Path) -> None:
    result = invoke(runner, config_path, "--log-level", "loud", "version")

    assert result.exit_code == 1
    assert "unknown log level" in result.output
