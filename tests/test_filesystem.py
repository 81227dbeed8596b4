"""
Tests for directory and file creation with parent bootstrapping.
"""
import os
import sys
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from untar import filesystem
from untar.filesystem import create_directory, create_file, PARENT_DIR_MODE


class TestCreateDirectory:

    def test_creates_directory(self, in_tmp):
        assert create_directory("sub", 0o755) is True
        assert (in_tmp / "sub").is_dir()

    def test_strips_trailing_separator(self, in_tmp):
        assert create_directory("sub//", 0o755) is True
        assert (in_tmp / "sub").is_dir()

    def test_bootstraps_missing_parents(self, in_tmp):
        assert create_directory("a/b/c/", 0o700) is True
        assert (in_tmp / "a" / "b" / "c").is_dir()

    def test_parents_use_fixed_mode(self, in_tmp):
        with patch('untar.filesystem.os.mkdir', wraps=os.mkdir) as mock_mkdir:
            create_directory("a/b", 0o700)
        calls = [c.args for c in mock_mkdir.call_args_list]
        assert calls == [("a/b", 0o700), ("a", PARENT_DIR_MODE), ("a/b", 0o700)]

    def test_requested_mode_applied(self, in_tmp):
        create_directory("private", 0o700)
        assert (in_tmp / "private").stat().st_mode & 0o777 == 0o700

    def test_existing_directory_is_success(self, in_tmp, capsys):
        (in_tmp / "there").mkdir()
        assert create_directory("there/", 0o755) is True
        assert capsys.readouterr().err == ""

    def test_failure_is_reported_not_raised(self, in_tmp, capsys):
        (in_tmp / "blocker").write_text("plain file")
        assert create_directory("blocker/sub", 0o755) is False
        err = capsys.readouterr().err
        assert "Could not create directory blocker/sub" in err

    def test_file_in_the_way(self, in_tmp, capsys):
        (in_tmp / "name").write_text("plain file")
        assert create_directory("name", 0o755) is False
        assert "Could not create directory name" in capsys.readouterr().err

    def test_empty_path(self, in_tmp):
        assert create_directory("/", 0o755) is True


class TestCreateFile:

    def test_creates_file(self, in_tmp):
        f = create_file("new.txt", 0o644)
        assert f is not None
        with f:
            f.write(b"data")
        assert (in_tmp / "new.txt").read_bytes() == b"data"

    def test_truncates_existing_file(self, in_tmp):
        (in_tmp / "old.txt").write_bytes(b"previous content")
        with create_file("old.txt", 0o644) as f:
            f.write(b"new")
        assert (in_tmp / "old.txt").read_bytes() == b"new"

    def test_bootstraps_parent_directory(self, in_tmp):
        with create_file("x/y/z.txt", 0o644) as f:
            f.write(b"deep")
        assert (in_tmp / "x" / "y" / "z.txt").read_bytes() == b"deep"
        assert (in_tmp / "x").stat().st_mode & 0o777 == PARENT_DIR_MODE & ~_umask()

    def test_returns_none_when_parent_is_a_file(self, in_tmp, capsys):
        (in_tmp / "blocker").write_text("plain file")
        assert create_file("blocker/file.txt", 0o644) is None
        err = capsys.readouterr().err
        assert "Could not create directory blocker" in err
        assert "Could not create file blocker/file.txt" in err

    def test_returns_none_without_parent(self, in_tmp, capsys):
        (in_tmp / "adir").mkdir()
        assert create_file("adir", 0o644) is None
        assert "Could not create file adir" in capsys.readouterr().err

    def test_retries_once(self, in_tmp):
        with patch('builtins.open', side_effect=PermissionError("denied")) as mock_open_:
            with patch.object(filesystem, 'create_directory') as mock_create_dir:
                assert create_file("d/f", 0o644) is None
        assert mock_open_.call_count == 2
        mock_create_dir.assert_called_once_with("d", PARENT_DIR_MODE)


def _umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask
