from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_DEFAULT_MODE = 0o644


@contextmanager
def atomic_target(path: Path) -> Iterator[Path]:
    """Yield a temp path in ``path``'s directory and rename it over ``path`` on success.

    Readers never observe a half-written file: either the old content or the
    complete new one. The temp file is removed when the block raises.
    """
    path = Path(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    os.close(fd)
    tmp_path = Path(tmp)
    try:
        yield tmp_path
        # mkstemp creates 0600 files; keep the mode the target already had
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else _DEFAULT_MODE
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def copy_atomic(src: Path, dst: Path) -> None:
    with atomic_target(dst) as tmp:
        shutil.copyfile(src, tmp)
    shutil.copystat(src, dst)
