import logging

import pytest

import mcrelease as mc
from mcrelease import cli, nbt


def test_main(make_world):
    world = make_world()
    assert cli.main([str(world), '--quiet']) == 0
    data = nbt.load(mc.release_path(world) / "level.dat")['Data']
    assert 'Player' not in data


def test_main_output(make_world, tmp_path):
    world = make_world()
    output = tmp_path / "public"
    assert cli.main([str(world / "level.dat"), '-o', str(output)]) == 0
    assert (output / "level.dat").is_file()


def test_main_invalid_world(tmp_path, caplog):
    with caplog.at_level(logging.CRITICAL):
        assert cli.main([str(tmp_path / "nowhere")]) == 1
    assert "not a valid Minecraft Java Edition world" in caplog.text


def test_main_cleanup_errors(make_world):
    world = make_world()
    for path in (world / "stats").iterdir():
        path.unlink()
    (world / "stats").rmdir()
    (world / "stats").write_text("")
    assert cli.main([str(world), '-q']) == 2


def test_parser():
    parser = cli.basic_parser(cli.__doc__)
    assert parser.description.startswith("Create a release copy")
    args = parser.parse_args(['World', '-v'], log_args=False)
    assert args.world == 'World'
    assert args.output is None
    assert args.loglevel == logging.DEBUG
    with pytest.raises(SystemExit):
        parser.parse_args(['World', '-q', '-v'], log_args=False)


def test_main_unwritable_level(make_world, monkeypatch, caplog):
    def denied(filename, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(filename))

    world = make_world()
    monkeypatch.setattr(mc.level, 'open', denied, raising=False)
    with caplog.at_level(logging.CRITICAL):
        assert cli.main([str(world)]) == 1
    assert "Cannot open" in caplog.text
