"""Tests for the action orchestration and runner reporting."""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from gcs_upload.action import run_action, run_upload
from gcs_upload.exceptions import UploadError
from gcs_upload.uploader import ProgressEvent, StorageUploader
from gcs_upload.utils.config import ActionConfig


def make_uploader(events_for=None):
    """
    Uploader mock whose batch upload reports 50% then 100% per file.

    ``events_for`` may override the events emitted for a file list.
    """
    uploader = MagicMock(spec=StorageUploader)

    def iter_upload_files(files, destination_dir, part_size_bytes, base_dir):
        if events_for is not None:
            return iter(events_for(files))
        return iter(
            [
                event
                for file in files
                for event in (ProgressEvent(50, 100, file), ProgressEvent(100, 100, file))
            ]
        )

    uploader.iter_upload_files.side_effect = iter_upload_files
    return uploader


def make_config(**overrides):
    values = dict(access_token="token", bucket="test-bucket", destination="out")
    values.update(overrides)
    return ActionConfig(**values)


class TestRunUpload:
    """Test run_upload orchestration."""

    def test_nothing_to_upload(self, tmp_path):
        """Test no pattern and no file yields an empty result."""
        uploader = make_uploader()

        result = run_upload(make_config(), uploader, base_dir=tmp_path)

        assert result == []
        uploader.iter_upload_files.assert_not_called()
        uploader.upload.assert_not_called()

    def test_single_file_uses_joined_destination(self, tmp_path):
        """Test file='a.txt', destination='out' uploads to out/a.txt."""
        uploader = make_uploader()

        result = run_upload(make_config(file="a.txt"), uploader, base_dir=tmp_path)

        uploader.upload.assert_called_once_with(
            "a.txt", "out/a.txt", base_dir=tmp_path.resolve()
        )
        assert result == ["a.txt"]

    def test_pattern_files_passed_in_expansion_order(self, tmp_path):
        """Test matched files reach the batch upload in expansion order."""
        (tmp_path / "a.png").write_bytes(b"a")
        (tmp_path / "b.png").write_bytes(b"b")
        (tmp_path / "notes.txt").write_bytes(b"n")
        uploader = make_uploader()

        result = run_upload(make_config(pattern="*.png"), uploader, base_dir=tmp_path)

        args, kwargs = uploader.iter_upload_files.call_args
        passed = args[0]
        assert sorted(passed) == ["a.png", "b.png"]
        assert args[1] == "out"
        assert kwargs == {"part_size_bytes": 1024, "base_dir": tmp_path.resolve()}
        assert result == passed

    def test_only_completed_files_are_reported(self, tmp_path):
        """Test files that never reach 100% are left out of the result."""
        (tmp_path / "a.png").write_bytes(b"a")
        uploader = make_uploader(
            events_for=lambda files: [
                ProgressEvent(50, 100, "a.png"),
                ProgressEvent(99, 100, "a.png"),
            ]
        )

        result = run_upload(make_config(pattern="*.png"), uploader, base_dir=tmp_path)

        assert result == []

    def test_quiet_progress_logs_only_completion(self, tmp_path, caplog):
        """Test displayProgress=false logs completions and nothing else."""
        caplog.set_level(logging.INFO)
        (tmp_path / "a.png").write_bytes(b"a")
        uploader = make_uploader()

        run_upload(make_config(pattern="*.png"), uploader, base_dir=tmp_path)

        messages = [record.getMessage() for record in caplog.records]
        assert "Uploaded: a.png" in messages
        assert not any(message.startswith("Uploading ") for message in messages)

    def test_display_progress_logs_every_event(self, tmp_path, caplog):
        """Test displayProgress=true logs each percentage."""
        caplog.set_level(logging.INFO)
        (tmp_path / "a.png").write_bytes(b"a")
        uploader = make_uploader()

        result = run_upload(
            make_config(pattern="*.png", display_progress=True), uploader, base_dir=tmp_path
        )

        messages = [record.getMessage() for record in caplog.records]
        assert "Uploading 50%: a.png" in messages
        assert "Uploading 100%: a.png" in messages
        assert result == ["a.png"]

    def test_pattern_without_matches(self, tmp_path):
        """Test a pattern matching nothing is not an error."""
        uploader = make_uploader()

        result = run_upload(make_config(pattern="*.png"), uploader, base_dir=tmp_path)

        assert result == []
        assert uploader.iter_upload_files.call_args[0][0] == []

    def test_pattern_and_file_together(self, tmp_path):
        """Test batch results come first, then the single file."""
        (tmp_path / "a.png").write_bytes(b"a")
        uploader = make_uploader()

        result = run_upload(
            make_config(pattern="*.png", file="CHANGELOG.md"), uploader, base_dir=tmp_path
        )

        assert result == ["a.png", "CHANGELOG.md"]

    def test_working_directory_is_used(self, tmp_path):
        """Test pattern and file resolve inside workingDirectory."""
        build = tmp_path / "build"
        build.mkdir()
        (build / "app.zip").write_bytes(b"z")
        (tmp_path / "root.zip").write_bytes(b"r")
        uploader = make_uploader()

        result = run_upload(
            make_config(pattern="*.zip", file="app.zip", working_directory="build"),
            uploader,
            base_dir=tmp_path,
        )

        assert uploader.iter_upload_files.call_args[0][0] == ["app.zip"]
        uploader.upload.assert_called_once_with("app.zip", "out/app.zip", base_dir=build.resolve())
        assert result == ["app.zip", "app.zip"]

    def test_bad_working_directory_is_not_fatal(self, tmp_path, caplog):
        """Test a missing workingDirectory logs an error and keeps going."""
        caplog.set_level(logging.INFO)
        (tmp_path / "a.png").write_bytes(b"a")
        uploader = make_uploader()

        result = run_upload(
            make_config(pattern="*.png", file="a.png", working_directory="nope"),
            uploader,
            base_dir=tmp_path,
        )

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].getMessage().startswith("chdir:")
        assert uploader.iter_upload_files.call_args[1]["base_dir"] == tmp_path
        assert result == ["a.png", "a.png"]

    def test_upload_error_stops_the_run(self, tmp_path):
        """Test a batch failure aborts before the single-file upload."""
        (tmp_path / "a.png").write_bytes(b"a")
        uploader = make_uploader()
        uploader.iter_upload_files.side_effect = UploadError("backend down")

        with pytest.raises(UploadError):
            run_upload(make_config(pattern="*.png", file="a.png"), uploader, base_dir=tmp_path)

        uploader.upload.assert_not_called()


class TestRunAction:
    """Test run_action input handling and runner reporting."""

    @pytest.fixture
    def environ(self, tmp_path):
        return {
            "INPUT_ACCESSTOKEN": "ya29.token",
            "INPUT_BUCKET": "test-bucket",
            "INPUT_DESTINATION": "out",
            "INPUT_FILE": "a.txt",
            "GITHUB_OUTPUT": str(tmp_path / "github_output"),
        }

    def test_missing_input_fails_before_any_upload(self, environ, capsys):
        """Test a missing destination fails without creating the uploader."""
        del environ["INPUT_DESTINATION"]

        with patch("gcs_upload.action.action.StorageUploader.create") as create:
            exit_code = run_action(environ)

        assert exit_code == 1
        create.assert_not_called()
        assert "::error::Input required and not supplied: destination" in capsys.readouterr().out

    def test_success_sets_files_output(self, environ, tmp_path, capsys):
        """Test the uploaded files are published as the JSON output 'files'."""
        uploader = make_uploader()

        with patch(
            "gcs_upload.action.action.StorageUploader.create", return_value=uploader
        ) as create:
            exit_code = run_action(environ)

        assert exit_code == 0
        create.assert_called_once()
        assert create.call_args[0] == ("ya29.token", "test-bucket")

        lines = (tmp_path / "github_output").read_text().splitlines()
        assert lines[0].startswith("files<<ghadelimiter_")
        assert json.loads(lines[1]) == ["a.txt"]
        assert lines[2] == lines[0].split("<<", 1)[1]

        out = capsys.readouterr().out
        assert "::add-mask::ya29.token" in out

    def test_upload_failure_fails_the_step(self, environ, tmp_path, capsys):
        """Test an UploadError exits non-zero and sets no output."""
        uploader = make_uploader()
        uploader.upload.side_effect = UploadError("Upload of a.txt failed: 403 denied")

        with patch("gcs_upload.action.action.StorageUploader.create", return_value=uploader):
            exit_code = run_action(environ)

        assert exit_code == 1
        assert "::error::Upload of a.txt failed: 403 denied" in capsys.readouterr().out
        assert not (tmp_path / "github_output").exists()

    def test_unexpected_error_fails_the_step(self, environ, capsys):
        """Test unexpected exceptions are reported, not raised."""
        with patch(
            "gcs_upload.action.action.StorageUploader.create",
            side_effect=RuntimeError("boom"),
        ):
            exit_code = run_action(environ)

        assert exit_code == 1
        assert "::error::Unexpected error: boom" in capsys.readouterr().out
