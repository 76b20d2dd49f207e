"""Console-script entry point for ``assetpub``.

The library itself only needs dulwich; click ships with the ``cli`` extra.
"""

import sys


def main():
    try:
        from .cli import main as cli_main
    except ImportError as exc:
        print(
            f"Error: 'assetpub' cannot start its command line ({exc}).\n"
            "The publish, hash and locks commands need click:  pip install 'assetpub[cli]'",
            file=sys.stderr,
        )
        raise SystemExit(1)
    cli_main()
