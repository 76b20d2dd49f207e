"""assetpub CLI: publish files and directories to a web-visible location."""

from ._helpers import main  # noqa: F401  entry point

# Import command modules to register Click commands with the main group.
from . import _publish, _locks  # noqa: F401
