"""Remote path helpers. FTP paths are always POSIX, whatever the local OS."""
import posixpath


def normalize_path(path: str) -> str:
    """Convert Windows separators and collapse redundant segments."""
    path = path.replace("\\", "/")
    if not path:
        return "/"
    return posixpath.normpath(path)


def remote_parent(path: str) -> str:
    """
    Parent of a remote path.

    A trailing slash names a directory itself: remote_parent("/a/b/") == "/a/b".
    """
    parent = posixpath.dirname(path.replace("\\", "/"))
    return parent or "/"


def join_remote(*parts: str) -> str:
    cleaned = [p.replace("\\", "/").strip("/") for p in parts if p and p.strip("/")]
    return "/" + "/".join(cleaned)
