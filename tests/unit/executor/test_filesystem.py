"""Tests for LocalFileSystem."""

from mco.executor.filesystem import LocalFileSystem


class TestLocalFileSystem:
    """Tests for LocalFileSystem."""

    def test_exists_and_size(self, media_file):
        fs = LocalFileSystem()
        assert fs.exists(media_file)
        assert fs.size(media_file) == 1024
        assert not fs.exists(media_file.with_name("nope.mp4"))

    def test_directory_is_not_readable_file(self, tmp_path):
        assert not LocalFileSystem().is_readable(tmp_path)

    def test_is_readable(self, media_file):
        assert LocalFileSystem().is_readable(media_file)

    def test_ensure_directory(self, tmp_path):
        target = tmp_path / "a" / "b"
        LocalFileSystem().ensure_directory(target)
        LocalFileSystem().ensure_directory(target)
        assert target.is_dir()
