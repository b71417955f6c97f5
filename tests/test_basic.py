"""
Basic tests for rubystrap
"""
import pytest
from rubystrap.cli import main


def test_import():
    """Test that we can import the main module"""
    assert main is not None


def test_version():
    """Test version is accessible"""
    from rubystrap import __version__
    assert __version__ == "0.4.2"


def test_module_entry_dispatches_to_cli(capsys):
    """python -m rubystrap --version goes through click"""
    from rubystrap.__main__ import run
    with pytest.raises(SystemExit) as exc:
        run(['--version'])
    assert exc.value.code == 0
    assert 'rubystrap v' in capsys.readouterr().out


def test_module_entry_dispatches_to_setup_path(tmp_path, capsys):
    """python -m rubystrap setup_path reports a missing rbenv"""
    from rubystrap.__main__ import run
    with pytest.raises(SystemExit) as exc:
        run(['setup_path', '--rbenv-root', str(tmp_path / 'missing')])
    assert exc.value.code == 1
    assert 'not installed' in capsys.readouterr().out
