"""
File Locking - Exclusive advisory lock held while a table file is written

- Unix/Linux/macOS: fcntl.flock
- Windows: msvcrt.locking

Readers never take this lock.
"""

import platform


def acquire_lock(file_handle) -> None:
    """Block until an exclusive lock on file_handle is held"""
    if platform.system() == "Windows":
        _acquire_lock_windows(file_handle)
    else:
        _acquire_lock_unix(file_handle)


def release_lock(file_handle) -> None:
    """Release the lock taken by acquire_lock()"""
    if platform.system() == "Windows":
        _release_lock_windows(file_handle)
    else:
        _release_lock_unix(file_handle)


def _acquire_lock_unix(file_handle) -> None:
    import fcntl

    fcntl.flock(file_handle.fileno(), fcntl.LOCK_EX)


def _release_lock_unix(file_handle) -> None:
    import fcntl

    fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)


def _acquire_lock_windows(file_handle) -> None:
    import msvcrt

    # Locks one byte at the current position; callers seek to 0 first.
    msvcrt.locking(file_handle.fileno(), msvcrt.LK_LOCK, 1)


def _release_lock_windows(file_handle) -> None:
    import msvcrt

    file_handle.seek(0)
    msvcrt.locking(file_handle.fileno(), msvcrt.LK_UNLCK, 1)
