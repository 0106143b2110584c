import pytest

from slideframe.inky_render import main


def test_file_argument_is_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
    assert "--file" in capsys.readouterr().err
