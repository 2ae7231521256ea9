import os
import tempfile


def stage_file(path, data, chmod=None):
    """Write bytes to a temp file next to path and return the temp path.

    path should already be resolved (see atomic_write). Keeps the existing
    file's permissions unless chmod is given. Nothing is left behind if the
    write fails.
    """
    if os.path.isdir(path):
        raise IsADirectoryError(f"Is a directory: {path}")
    directory = os.path.dirname(os.path.abspath(path))
    if chmod is None:
        try:
            chmod = os.stat(path).st_mode & 0o7777
        except FileNotFoundError:
            chmod = 0o644

    fd, temp_path = tempfile.mkstemp(dir=directory, prefix='.ohmycert-')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, chmod)
    except BaseException:
        discard(temp_path)
        raise
    return temp_path


def discard(temp_path):
    try:
        os.unlink(temp_path)
    except FileNotFoundError:
        pass


def atomic_write(path, data, chmod=None):
    """Write bytes to path via a temp file in the same directory and rename.

    A symlink at path is followed so the file it points to is replaced.
    Raises OSError on failure; the target is left untouched in that case.
    """
    target = os.path.realpath(path)
    temp_path = stage_file(target, data, chmod=chmod)
    try:
        os.replace(temp_path, target)
    except BaseException:
        discard(temp_path)
        raise


def atomic_write_many(files):
    """Replace several files only once all of them have been staged.

    files is a list of (path, data, chmod). If any staging step fails no
    target is touched.
    """
    staged = []
    try:
        for path, data, chmod in files:
            target = os.path.realpath(path)
            staged.append((stage_file(target, data, chmod=chmod), target))
        for temp_path, target in staged:
            os.replace(temp_path, target)
    except BaseException:
        for temp_path, _ in staged:
            discard(temp_path)
        raise
