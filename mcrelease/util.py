# This file is part of MCRelease
# Copyright (C) 2019 Rodrigo Silva (MestreLion) <linux@rodrigosilva.com>
# License: GPLv3 or later, at your choice. See <http://www.gnu.org/licenses/gpl>

"""Miscellaneous functions, classes and the exception hierarchy.

Exported items:
    MCError         -- Base class for all explicitly raised exceptions
    ValidationError -- Source is not a Minecraft world, or output is unusable
    CloneError      -- I/O failure while building the release tree
    FormatError     -- NBT data cannot be decoded or lacks a required tag
    MissingKey      -- Tag absent from a Compound
    TypeMismatch    -- Tag present in a Compound, but not of the requested type
    WorldIOError    -- Compression or cleanup I/O failure
"""

__all__ = [
    'MINECRAFT_SAVES_DIR',
    'MCError',
    'ValidationError',
    'CloneError',
    'FormatError',
    'MissingKey',
    'TypeMismatch',
    'WorldIOError',
    'AnyPath',
]

import os.path
import platform
import typing as t


# platform-dependent minecraft directory paths
if platform.system() == 'Windows':
    MINECRAFT_SAVES_DIR: str = os.path.expanduser('~/AppData/Roaming/.minecraft/saves')
else:
    MINECRAFT_SAVES_DIR: str = os.path.expanduser('~/.minecraft/saves')

# General type aliases
AnyPath = t.Union[str, os.PathLike]


class MCError(Exception):
    """Base class for custom exceptions, with errno and %-formatting for args.

    All modules in this package raise this (or a subclass) for all
    explicitly raised, business-logic, expected or handled exceptions
    """
    def __init__(self, msg: object = "", *args, errno: int = 0):
        super().__init__((str(msg) % args) if args else msg)
        self.errno = errno

    def __str__(self):
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""


class ValidationError(MCError, ValueError): pass
class CloneError(MCError, OSError): pass
class WorldIOError(MCError, OSError): pass


class FormatError(MCError, ValueError):
    """Malformed NBT data. offset, when known, is where in the data it was found"""
    def __init__(self, msg: object = "", *args, offset: t.Optional[int] = None, **kwargs):
        if args:
            msg = str(msg) % args
        if offset is not None:
            msg = f"{msg} (at offset {offset})"
        super().__init__(msg, **kwargs)
        self.offset = offset


class MissingKey(MCError, KeyError):
    def __init__(self, key: str, *args, **kwargs):
        super().__init__("Tag not found: %r", key, *args, **kwargs)
        self.key = key


class TypeMismatch(MCError, TypeError):
    def __init__(self, key: str, expected: type, actual: type, **kwargs):
        super().__init__("Tag %r is %s, expected %s",
                         key, actual.__name__, expected.__name__, **kwargs)
        self.key = key
        self.expected = expected
        self.actual = actual
