# This file is part of MCRelease
# Copyright (C) 2019 Rodrigo Silva (MestreLion) <linux@rodrigosilva.com>
# License: GPLv3 or later, at your choice. See <http://www.gnu.org/licenses/gpl>

"""Create a release copy of a Minecraft Java Edition world, for public redistribution.

The copy is created as a sibling directory named <WORLD>_RELEASE, replacing any
previous release. The single player state is removed from its level.dat, cheats
are disabled, and per-player data, stats, advancements, scoreboard, backup and
lock files are deleted.

Exported items:
    ArgumentParser -- argparse.ArgumentParser subclass with additional features
    basic_parser -- argparse-based parser with the release tool options
    main -- The 'mcrelease' command
"""

from __future__ import annotations

__all__ = [
    "ArgumentParser",
    "basic_parser",
    "main",
]

import argparse
import logging
import typing as t

from . import util as u
from . import world as w

log = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
    __doc__ = (
        (argparse.ArgumentParser.__doc__ or "")
        + f"""
    Changed in {__name__}:"""
    """
    - description -- Only first non-blank line is considered, unless multiline
        is True. Convenient when using a module's __doc__ as description.
    - suggest_on_error -- default to True instead of False.
    New Arguments:
    - multiline -- If True, do not limit description to its first non-blank line
        and set formatter_class to argparse.RawDescriptionHelpFormatter.
        (default: False)
    - loglevel_dest -- dest (name) of pre-created logging level parser
        argument, set as mutually-exclusive -q/--quiet|-v/--verbose options.
        If empty, no such options are created. (default: "loglevel")
    - version -- if not empty, add '-V/--version' argument with `version` action
        and a "%(prog)s <version>" string. (default: None)
    """
    )

    def __init__(
        self,
        *args: t.Any,
        multiline: bool = False,
        loglevel_dest: str = "loglevel",
        version: str | None = None,
        **kwargs: t.Any,
    ):
        super().__init__(*args, **kwargs)

        if "suggest_on_error" not in kwargs:
            # New in Python 3.14
            self.suggest_on_error = True

        if self.description is not None and not multiline:
            self.description = self.description.strip().split("\n", maxsplit=1)[0]

        if multiline:
            self.formatter_class = argparse.RawDescriptionHelpFormatter

        self.loglevel_dest = loglevel_dest

        if self.loglevel_dest:
            group = self.add_mutually_exclusive_group()
            group.add_argument(
                "-q",
                "--quiet",
                dest=self.loglevel_dest,
                const=logging.WARNING,
                default=logging.INFO,
                action="store_const",
                help="Suppress informative messages and progress.",
            )
            group.add_argument(
                "-v",
                "--verbose",
                dest=self.loglevel_dest,
                const=logging.DEBUG,
                action="store_const",
                help="Verbose mode, output extra info.",
            )

        if version:
            self.add_argument(
                "-V",
                "--version",
                action="version",
                version=f"%(prog)s {version}",
            )

    def parse_args(  # type: ignore  # accurate typing requires overload
        self, *args: t.Any, log_args: bool = True, **kwargs: t.Any
    ) -> argparse.Namespace:
        arguments: argparse.Namespace = super().parse_args(*args, **kwargs)
        if self.loglevel_dest and log_args:
            logging.basicConfig(
                level=getattr(arguments, self.loglevel_dest),
                format="%(levelname)s: %(message)s",
            )
            log.debug("Arguments: %s", arguments)
        return arguments


def basic_parser(description=None, **kw_argparser) -> ArgumentParser:
    """argparse-based parser with the release tool options."""
    parser = ArgumentParser(description=description, **kw_argparser)
    parser.add_argument('world',
                        help="Minecraft world, either its directory, its 'level.dat'"
                             " file or a name under '~/.minecraft/saves' folder.")
    parser.add_argument('--output', '-o', default=None,
                        help="Release world directory."
                             f" [Default: '<WORLD>{w.RELEASE_SUFFIX}']")
    return parser


def main(argv: t.Optional[t.Sequence[str]] = None) -> int:
    """Run the release tool, return the exit status.

    0 on success, 1 if the release failed, 2 if it was created but some
    files could not be cleaned up.
    """
    from . import __version__

    parser = basic_parser(__doc__, version=__version__)
    args = parser.parse_args(argv)

    try:
        report = w.release(args.world,
                           output=args.output,
                           progress=args.loglevel <= logging.INFO)
    except u.MCError as e:
        log.critical(e)
        return 1

    if not report.ok:
        log.warning("Release %r created, but %d cleanup targets failed",
                    str(report.path), len(report.errors))
        return 2

    log.info("Done!")
    return 0
