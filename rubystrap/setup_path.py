#!/usr/bin/env python3
"""
rubystrap PATH Setup Utility
Tells macOS/Linux users how to put rbenv on PATH and enable its shims
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional

RBENV_INIT_LINE = 'eval "$(rbenv init -)"'


def rbenv_path_line(rbenv_root: Path) -> str:
    """The PATH export line for ``rbenv_root``/bin"""
    return f'export PATH="{rbenv_root}/bin:$PATH"'


def get_shell(environ: Optional[Mapping[str, str]] = None) -> str:
    """Detect user's shell name from $SHELL"""
    environ = os.environ if environ is None else environ
    shell = environ.get('SHELL', '')
    return Path(shell).name if shell else 'unknown'


def profile_files(shell: str, home: Optional[Path] = None) -> List[Path]:
    """
    Startup files for ``shell``, the preferred one first

    bash reads ~/.bash_profile; zsh prefers ~/.zshenv when it already exists,
    ~/.zshrc otherwise; anything else gets ~/.profile.
    """
    home = home or Path.home()
    if shell == 'bash':
        return [home / '.bash_profile']
    elif shell == 'zsh':
        if (home / '.zshenv').exists():
            return [home / '.zshenv', home / '.zshrc']
        return [home / '.zshrc', home / '.zshenv']
    return [home / '.profile']


def _read(path: Path) -> str:
    try:
        return path.read_text()
    except (IOError, OSError):
        return ''


def is_in_path(directory, environ: Optional[Mapping[str, str]] = None) -> bool:
    """Check if directory is in PATH"""
    environ = os.environ if environ is None else environ
    path_dirs = environ.get('PATH', '').split(os.pathsep)
    return str(directory) in path_dirs


def rbenv_init_configured(profiles: List[Path]) -> bool:
    """True if any profile already runs ``rbenv init``"""
    return any(RBENV_INIT_LINE in _read(profile) for profile in profiles)


def shell_setup_hints(rbenv_root: Path, environ: Optional[Mapping[str, str]] = None,
                      home: Optional[Path] = None) -> List[str]:
    """
    Commands the user still has to run so rbenv works in new shells

    Returns:
        Shell command lines; empty when PATH and shims are already set up
    """
    environ = os.environ if environ is None else environ
    profiles = profile_files(get_shell(environ), home)
    target = profiles[0]
    hints = []

    if not is_in_path(rbenv_root / 'bin', environ):
        hints.append(f"echo '{rbenv_path_line(rbenv_root)}' >> {target}")
    if not rbenv_init_configured(profiles):
        hints.append(f"echo '{RBENV_INIT_LINE}' >> {target}")
    if hints:
        hints.append("exec $SHELL")
    return hints


def add_to_profile(line: str, profile: Path) -> bool:
    """Append ``line`` to ``profile`` unless it's already there"""
    content = _read(profile)
    if line in content:
        print(f"✅ already in {profile}")
        return False

    profile.parent.mkdir(parents=True, exist_ok=True)
    with open(profile, 'a') as f:
        f.write('\n# Added by rubystrap\n')
        f.write(f'{line}\n')

    print(f"✅ Added to {profile}: {line}")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(prog='rubystrap setup_path',
                                     description='Show or apply the shell setup rbenv needs')
    parser.add_argument('--apply', action='store_true', help='Append the lines to your shell profile')
    parser.add_argument('--rbenv-root', default='~/.rbenv', help='rbenv installation directory')
    args = parser.parse_args(argv)

    rbenv_root = Path(os.path.expanduser(args.rbenv_root))
    if not rbenv_root.is_dir():
        print(f"❌ rbenv is not installed at {rbenv_root}")
        print("\nRun: rubystrap install")
        sys.exit(1)

    hints = shell_setup_hints(rbenv_root)
    if not hints:
        print("✅ rbenv is already on PATH and its shims are enabled")
        sys.exit(0)

    profile = profile_files(get_shell())[0]
    if not args.apply:
        print("Run the following commands to finish setting up rbenv:\n")
        for hint in hints:
            print(f"  {hint}")
        sys.exit(0)

    if not is_in_path(rbenv_root / 'bin'):
        add_to_profile(rbenv_path_line(rbenv_root), profile)
    if not rbenv_init_configured(profile_files(get_shell())):
        add_to_profile(RBENV_INIT_LINE, profile)
    print("\nTo apply changes, run: exec $SHELL")


if __name__ == '__main__':
    main()
