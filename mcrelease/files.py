# This file is part of MCRelease
# Copyright (C) 2019 Rodrigo Silva (MestreLion) <linux@rodrigosilva.com>
# License: GPLv3 or later, at your choice. See <http://www.gnu.org/licenses/gpl>

"""Filesystem operations on world directories

Exported items:
    clone             -- Recursively copy a directory, skipping symlinks and special files
    empty             -- Remove all regular files directly inside a directory
    remove_if_present -- Remove a regular file, if it exists
"""

__all__ = [
    'clone',
    'empty',
    'remove_if_present',
]

import logging
import os
import pathlib
import shutil

import tqdm

from . import util as u

log = logging.getLogger(__name__)


def clone(source: u.AnyPath, destination: u.AnyPath, progress: bool = False) -> int:
    """Copy the directory tree at source to destination, return files copied.

    Regular files are copied with their permission bits, directories are
    created as needed and recurred into. Anything else is skipped, including
    symlinks, which are never followed: they could loop or point outside the
    world directory.

    Raise CloneError if source is not a directory or at the first OS error,
    leaving whatever was already copied in destination.
    """
    source = pathlib.Path(source)
    destination = pathlib.Path(destination)
    if not source.is_dir():
        raise u.CloneError("%r is not a directory", str(source))
    if source.resolve() in (destination.resolve(), *destination.resolve().parents):
        raise u.CloneError("Cannot clone %r into itself: %r", str(source), str(destination))

    with tqdm.tqdm(desc=source.name, unit=" files", disable=not progress) as pbar:
        try:
            destination.mkdir(parents=True, exist_ok=True)
            count = _clone_directory(source, destination, pbar)
        except OSError as e:
            raise u.CloneError("Cannot clone directory %r: %s", str(destination), e) from e
    return count


def _clone_directory(source: pathlib.Path, destination: pathlib.Path, pbar: tqdm.tqdm) -> int:
    count = 0
    with os.scandir(source) as entries:
        for entry in entries:
            target = destination.joinpath(entry.name)
            if entry.is_file(follow_symlinks=False):
                # Content and permission bits
                shutil.copy(entry.path, target)
                pbar.update()
                count += 1
            elif entry.is_dir(follow_symlinks=False):
                target.mkdir(parents=True, exist_ok=True)
                count += _clone_directory(pathlib.Path(entry.path), target, pbar)
            else:
                log.debug("Skipping %s, not a regular file or directory", entry.path)
    return count


def empty(directory: u.AnyPath) -> int:
    """Remove all regular files directly in directory, return how many.

    Subdirectories and their contents are left untouched. A non-existing
    directory is not an error, and 0 is returned. Raise WorldIOError if it
    exists but is not a directory, or on any removal error.
    """
    directory = pathlib.Path(directory)
    if not directory.exists():
        return 0
    if not directory.is_dir():
        raise u.WorldIOError("%r is not a directory", str(directory))

    count = 0
    try:
        with os.scandir(directory) as entries:
            files = [_.path for _ in entries if _.is_file(follow_symlinks=False)]
        for path in files:
            os.remove(path)
            count += 1
    except OSError as e:
        raise u.WorldIOError("Cannot remove all files from %r: %s", str(directory), e) from e
    return count


def remove_if_present(path: u.AnyPath) -> bool:
    """Remove path if it is a regular file, return if it was removed.

    Raise WorldIOError if removal fails.
    """
    path = pathlib.Path(path)
    if path.is_symlink() or not path.is_file():
        return False
    try:
        path.unlink()
    except OSError as e:
        raise u.WorldIOError("Cannot delete file %r: %s", str(path), e) from e
    return True
