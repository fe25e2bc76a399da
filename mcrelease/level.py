# This file is part of MCRelease
# Copyright (C) 2019 Rodrigo Silva (MestreLion) <linux@rodrigosilva.com>
# License: GPLv3 or later, at your choice. See <http://www.gnu.org/licenses/gpl>

"""Level.dat and its sanitizing for release

Exported items:
    Level          -- Class representing the main file 'level.dat', inherits from nbt.Root
    SanitizeReport -- What sanitize() changed, a NamedTuple
    sanitize       -- Remove the single player state and disable cheats
    rewrite        -- Sanitize a level.dat file in place
"""

from __future__ import annotations

__all__ = [
    'Level',
    'SanitizeReport',
    'sanitize',
    'rewrite',
]

import logging
import typing as t

from . import nbt
from . import util as u

log = logging.getLogger(__name__)
T = t.TypeVar('T', bound='Level')

# Tag names
DATA = 'Data'
PLAYER = 'Player'
ALLOW_COMMANDS = 'allowCommands'


class SanitizeReport(t.NamedTuple):
    player_removed:    bool
    commands_disabled: bool

    @property
    def changed(self) -> bool:
        return self.player_removed or self.commands_disabled


def _data(root: nbt.Compound) -> nbt.Compound:
    try:
        return nbt.get_tag(root, DATA, nbt.Compound)
    except (u.MissingKey, u.TypeMismatch) as e:
        raise u.FormatError("This file doesn't contain a %s tag: %s", DATA, e) from e


def sanitize(root: nbt.Compound) -> SanitizeReport:
    """Prepare a level.dat root tag for public release.

    Remove the state of the player, in the case this is a single-player world,
    and set allowCommands to 0 to disable cheats. Both tags are optional.

    Raise FormatError if root has no 'Data' Compound, in which case nothing
    is changed. Running it again on the same root reports no changes.
    """
    data = _data(root)

    player_removed = PLAYER in data
    if player_removed:
        del data[PLAYER]
        log.info("- Removed state of the player in level.dat")

    commands_disabled = False
    try:
        allow_commands = nbt.get_tag(data, ALLOW_COMMANDS, nbt.Byte)
    except u.MissingKey:
        pass
    except u.TypeMismatch as e:
        log.warning("Leaving %s untouched: %s", ALLOW_COMMANDS, e)
    else:
        if allow_commands != 0:
            data[ALLOW_COMMANDS] = nbt.Byte(0)
            commands_disabled = True
            log.info("- Set %s = 0 to disable cheats in level.dat", ALLOW_COMMANDS)

    return SanitizeReport(player_removed, commands_disabled)


class Level(nbt.Root):
    """level.dat file"""

    __slots__ = ()

    @property
    def data(self) -> nbt.Compound: return _data(self)

    @property
    def player(self) -> t.Optional[nbt.Compound]:
        """The single player, if any"""
        return self.data.get(PLAYER)

    @property
    def allow_commands(self) -> bool:
        return bool(self.data.get(ALLOW_COMMANDS, 0))

    def sanitize(self) -> SanitizeReport:
        return sanitize(self)

    @classmethod
    def load(cls: t.Type[T], filename: u.AnyPath) -> T:
        return nbt.load(filename, cls=cls)

    def save(self, filename: u.AnyPath) -> None:
        nbt.save(self, filename)


def rewrite(filename: u.AnyPath) -> SanitizeReport:
    """Sanitize a level.dat file in place.

    The file is decoded and sanitized before being truncated, so a FormatError
    leaves it untouched. An interruption while writing leaves it corrupt,
    there is no temporary file.
    """
    try:
        fileobj = open(filename, 'r+b')
    except OSError as e:
        raise u.WorldIOError("Cannot open %r: %s", str(filename), e) from e
    with fileobj:
        level = nbt.decode(fileobj, cls=Level)
        report = level.sanitize()
        try:
            fileobj.truncate(0)
            fileobj.seek(0)
        except OSError as e:
            raise u.WorldIOError("Cannot truncate %r: %s", str(filename), e) from e
        nbt.encode(fileobj, level)
    log.debug("Rewrote %s: %s", filename, report)
    return report
