import pytest

import mcrelease as mc
from mcrelease import nbt

from conftest import level_root


def test_sanitize_removes_player_and_disables_cheats():
    root = level_root(player=True, allow_commands=1)
    report = mc.sanitize(root)
    assert report == mc.SanitizeReport(player_removed=True, commands_disabled=True)
    assert report.changed
    data = root['Data']
    assert 'Player' not in data
    assert data['allowCommands'] == 0
    assert isinstance(data['allowCommands'], nbt.Byte)


def test_sanitize_keeps_other_tags_in_order():
    root = level_root()
    mc.sanitize(root)
    assert list(root['Data'].keys()) == ['DataVersion', 'LevelName', 'allowCommands', 'GameType']
    assert root['Data']['LevelName'] == "MyWorld"


def test_sanitize_is_idempotent():
    root = level_root()
    mc.sanitize(root)
    once = nbt.Compound(root['Data'])
    report = mc.sanitize(root)
    assert report == (False, False)
    assert not report.changed
    assert root['Data'] == once


def test_sanitize_tolerates_missing_tags():
    root = level_root(player=False, allow_commands=None)
    before = dict(root['Data'])
    assert mc.sanitize(root) == (False, False)
    assert root['Data'] == before


def test_sanitize_commands_already_disabled():
    root = level_root(player=False, allow_commands=0)
    assert mc.sanitize(root) == (False, False)
    assert root['Data']['allowCommands'] == 0


def test_sanitize_player_of_any_type():
    root = level_root(player=False, allow_commands=None)
    root['Data']['Player'] = nbt.String("not a compound")
    assert mc.sanitize(root).player_removed
    assert 'Player' not in root['Data']


def test_sanitize_ignores_mistyped_allow_commands(caplog):
    root = level_root(player=False, allow_commands=None)
    root['Data']['allowCommands'] = nbt.Int(1)
    assert mc.sanitize(root) == (False, False)
    assert root['Data']['allowCommands'] == 1
    assert isinstance(root['Data']['allowCommands'], nbt.Int)
    assert "allowCommands" in caplog.text


@pytest.mark.parametrize('root', [
    nbt.Root(),
    nbt.Root({'data': nbt.Compound()}),
    nbt.Root({'Data': nbt.Int(1)}),
])
def test_sanitize_without_data(root):
    before = dict(root)
    with pytest.raises(mc.FormatError, match="Data"):
        mc.sanitize(root)
    assert root == before


def test_level_properties(tmp_path):
    filename = tmp_path / "level.dat"
    nbt.save(level_root(), filename)
    level = mc.Level.load(filename)
    assert isinstance(level, mc.Level)
    assert level.player['Pos'][1] == 64.0
    assert level.allow_commands

    level.sanitize()
    level.save(filename)
    level = mc.Level.load(filename)
    assert level.player is None
    assert not level.allow_commands


def test_rewrite(tmp_path):
    filename = tmp_path / "level.dat"
    nbt.save(level_root(), filename)
    assert mc.rewrite(filename) == (True, True)

    data = nbt.load(filename)['Data']
    assert 'Player' not in data
    assert data['allowCommands'] == 0
    assert mc.rewrite(filename) == (False, False)


def test_rewrite_without_data_leaves_file_untouched(tmp_path):
    filename = tmp_path / "level.dat"
    nbt.save(nbt.Root({'Other': nbt.Byte(1)}), filename)
    before = filename.read_bytes()
    with pytest.raises(mc.FormatError):
        mc.rewrite(filename)
    assert filename.read_bytes() == before


def test_rewrite_corrupt_file_untouched(tmp_path):
    filename = tmp_path / "level.dat"
    filename.write_bytes(b"not gzipped at all")
    with pytest.raises(mc.WorldIOError):
        mc.rewrite(filename)
    assert filename.read_bytes() == b"not gzipped at all"


def test_rewrite_missing_file(tmp_path):
    with pytest.raises(mc.WorldIOError, match="Cannot open"):
        mc.rewrite(tmp_path / "level.dat")


def test_rewrite_directory(tmp_path):
    with pytest.raises(mc.WorldIOError) as excinfo:
        mc.rewrite(tmp_path)
    assert isinstance(excinfo.value, OSError)
