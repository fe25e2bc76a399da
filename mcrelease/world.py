# This file is part of MCRelease
# Copyright (C) 2019 Rodrigo Silva (MestreLion) <linux@rodrigosilva.com>
# License: GPLv3 or later, at your choice. See <http://www.gnu.org/licenses/gpl>

"""Minecraft World save directory and its release copy. The top level hierarchy.

Exported items:
    release       -- Create a sanitized release copy of a world
    ReleaseReport -- Data returned by release()
    find_world    -- Locate a world directory from a path or a save name
"""

__all__ = [
    'RELEASE_SUFFIX',
    'LEVEL_FILE',
    'REMOVE_FILES',
    'EMPTY_DIRS',
    'ReleaseReport',
    'find_world',
    'validate',
    'release_path',
    'cleanup',
    'release',
]

import logging
import pathlib
import shutil
import typing as t

from . import files
from . import level
from . import util as u

log = logging.getLogger(__name__)

RELEASE_SUFFIX = "_RELEASE"
LEVEL_FILE = "level.dat"

# Relative to world directory
REMOVE_FILES: t.Tuple[str, ...] = (
    "level.dat_old",
    "session.lock",
    "data/scoreboard.dat",
)
EMPTY_DIRS: t.Tuple[str, ...] = (
    "advancements",
    "playerdata",
    "stats",
)


class ReleaseReport(t.NamedTuple):
    """Data returned by release()"""
    path:    pathlib.Path             # Release world directory
    copied:  int                      # Files cloned from source
    level:   level.SanitizeReport
    removed: t.List[str]              # From REMOVE_FILES
    emptied: t.Dict[str, int]         # From EMPTY_DIRS, with files removed
    errors:  t.List[u.WorldIOError]   # Cleanup failures

    @property
    def ok(self) -> bool:
        return not self.errors


def find_world(world: u.AnyPath) -> pathlib.Path:
    """World directory from its path, its level.dat path, or a save name"""
    path = pathlib.Path(world).expanduser()
    if path.is_file() and path.name == LEVEL_FILE:
        return path.parent
    if path.is_dir():
        return path
    # Last chance: try path as name of a minecraft save dir
    mcpath = pathlib.Path(u.MINECRAFT_SAVES_DIR, path).expanduser()
    if mcpath.is_dir():
        return mcpath
    return path


def validate(world: u.AnyPath) -> pathlib.Path:
    """Raise ValidationError if world is not a Java Edition world directory"""
    path = find_world(world)
    if not path.joinpath(LEVEL_FILE).is_file():
        raise u.ValidationError("%r is not a valid Minecraft Java Edition world", str(world))
    return path


def release_path(world: u.AnyPath) -> pathlib.Path:
    """<world>_RELEASE, a sibling directory of world"""
    path = pathlib.Path(world)
    if not path.name:  # '.', '/'
        path = path.resolve()
    return path.with_name(path.name + RELEASE_SUFFIX)


def cleanup(world: u.AnyPath) -> t.Tuple[t.List[str], t.Dict[str, int], t.List[u.WorldIOError]]:
    """Remove files and empty directories that should not be released.

    Each target is independent: a failure is logged and collected, and the
    remaining targets are still attempted.

    Return (removed files, {emptied directory: file count}, errors)
    """
    path = pathlib.Path(world)
    removed: t.List[str] = []
    emptied: t.Dict[str, int] = {}
    errors: t.List[u.WorldIOError] = []

    for name in REMOVE_FILES:
        try:
            if files.remove_if_present(path.joinpath(name)):
                removed.append(name)
                log.info("- Removed file %s", name)
        except u.WorldIOError as e:
            log.error("Error when deleting file %s: %s", name, e)
            errors.append(e)

    for name in EMPTY_DIRS:
        try:
            count = files.empty(path.joinpath(name))
        except u.WorldIOError as e:
            log.error("Error when removing all files from directory %s: %s", name, e)
            errors.append(e)
            continue
        if count:
            emptied[name] = count
            log.info("- Emptied directory %s (%d files)", name, count)

    return removed, emptied, errors


def release(
    world: u.AnyPath,
    output: t.Optional[u.AnyPath] = None,
    progress: bool = False,
) -> ReleaseReport:
    """Create a sanitized copy of world, ready for public redistribution.

    output defaults to release_path(world). A previous release there is removed.

    ValidationError, CloneError and FormatError abort the process. The latter
    happens after cloning, leaving an unsanitized level.dat in the release.
    Cleanup errors are collected in the returned report instead.
    """
    source = validate(world)
    destination = pathlib.Path(output) if output is not None else release_path(source)
    resolved = source.resolve(), destination.resolve()
    if resolved[0] in (resolved[1], *resolved[1].parents) or resolved[1] in resolved[0].parents:
        # Removing a previous release there would delete the world
        raise u.ValidationError("Release directory %r overlaps the world %r",
                                str(destination), str(source))

    log.info("Releasing World %r to %r", str(source), str(destination))

    if destination.is_dir():
        try:
            shutil.rmtree(destination)
        except OSError as e:
            raise u.CloneError("Cannot remove directory %r: %s", str(destination), e) from e
        log.info("- Removed previous release directory %r", str(destination))

    copied = files.clone(source, destination, progress=progress)
    log.info("- Created %r release world (%d files)", str(destination), copied)

    report = level.rewrite(destination.joinpath(LEVEL_FILE))
    removed, emptied, errors = cleanup(destination)

    return ReleaseReport(
        path    = destination,
        copied  = copied,
        level   = report,
        removed = removed,
        emptied = emptied,
        errors  = errors,
    )
