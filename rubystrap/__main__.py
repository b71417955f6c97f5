#!/usr/bin/env python3
"""
Entry point for ``python3 -m rubystrap``

``python3 -m rubystrap setup_path [--apply]`` runs the shell profile helper;
anything else goes to the click CLI.
"""

import sys


def run(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if argv[:1] == ['setup_path']:
        from rubystrap.setup_path import main as setup_path_main
        return setup_path_main(argv[1:])

    from rubystrap.cli import main as cli_main
    return cli_main(args=argv, prog_name='rubystrap')


if __name__ == '__main__':
    sys.exit(run())
