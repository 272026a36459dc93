from __future__ import annotations


class QltlError(Exception):
    pass


class DownloadError(QltlError):
    """The file stream endpoint answered with a non-2xx status."""


class LoadCancelled(QltlError):
    """A dataset load finished after a newer render superseded it."""
