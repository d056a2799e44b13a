"""Tests for FileCollector."""
from ftp_uploader.orchestrator.file_collector import FileCollector
from ftp_uploader.utils.paths import join_remote, normalize_path, remote_parent


def test_collect_single_file(tmp_path):
    path = tmp_path / "report.pdf"
    path.write_bytes(b"x" * 42)

    (descriptor,) = FileCollector.collect(path, "/docs")

    assert descriptor.name == "report.pdf"
    assert descriptor.server_path == "/docs/report.pdf"
    assert descriptor.size == 42
    assert descriptor.is_directory is False


def test_collect_folder(tmp_path):
    root = tmp_path / "photos"
    (root / "2025").mkdir(parents=True)
    (root / "a.jpg").write_bytes(b"aa")
    (root / "2025" / "b.jpg").write_bytes(b"bbb")

    descriptors = FileCollector.collect(root, "/backup")

    assert [(d.server_path, d.is_directory, d.size) for d in descriptors] == [
        ("/backup/photos/", True, 0),
        ("/backup/photos/a.jpg", False, 2),
        ("/backup/photos/2025/", True, 0),
        ("/backup/photos/2025/b.jpg", False, 3),
    ]


def test_collect_defaults_to_root(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("hi")
    assert FileCollector.collect(path)[0].server_path == "/a.txt"


def test_path_helpers():
    assert normalize_path("\\a\\b\\") == "/a/b"
    assert normalize_path("") == "/"
    assert remote_parent("/a/b/") == "/a/b"
    assert remote_parent("/a/b.txt") == "/a"
    assert remote_parent("b.txt") == "/"
    assert join_remote("/", "x", "y.txt") == "/x/y.txt"
    assert join_remote("backup/", "/photos") == "/backup/photos"
