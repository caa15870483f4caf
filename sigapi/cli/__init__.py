"""
sigapi command-line interface.

Usage:
    sigapi export myapp.api:router --format yaml
    sigapi routes myapp.api:router
    sigapi serve myapp.api:router --port 8000
"""

from .. import __version__

__cli_name__ = "sigapi"
