import pathlib
import typing as t

import pytest

from mcrelease import nbt


def level_root(player: bool = True, allow_commands: t.Optional[int] = 1) -> nbt.Root:
    """A minimal level.dat root tag"""
    data = nbt.Compound({
        'DataVersion': nbt.Int(2586),
        'LevelName': nbt.String("MyWorld"),
    })
    if player:
        data['Player'] = nbt.Compound({
            'Pos': nbt.List[nbt.Double]([nbt.Double(1.5), nbt.Double(64.0), nbt.Double(-3.25)]),
            'Inventory': nbt.List[nbt.Compound](),
        })
    if allow_commands is not None:
        data['allowCommands'] = nbt.Byte(allow_commands)
    data['GameType'] = nbt.Int(0)
    return nbt.Root({'Data': data})


@pytest.fixture()
def make_world(tmp_path: pathlib.Path):
    """Factory for worlds with all the files a release must not contain"""
    def make(name: str = "MyWorld", root: t.Optional[nbt.Compound] = None) -> pathlib.Path:
        world = tmp_path / name
        for subdir in ("data", "advancements", "playerdata", "stats", "region"):
            (world / subdir).mkdir(parents=True)
        nbt.save(level_root() if root is None else root, world / "level.dat")
        (world / "level.dat_old").write_bytes(b"old level")
        (world / "session.lock").write_bytes(b"\xe2\x98\x83")
        (world / "data" / "scoreboard.dat").write_bytes(b"scores")
        (world / "data" / "raids.dat").write_bytes(b"raids")
        (world / "advancements" / "a.json").write_text("{}")
        (world / "playerdata" / "u.dat").write_bytes(b"player")
        (world / "stats" / "s.json").write_text("{}")
        (world / "region" / "r.0.0.mca").write_bytes(bytes(range(256)) * 16)
        return world
    return make
