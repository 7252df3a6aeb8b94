"""Allow running as: python -m matrix_rain"""

from .app import cli

cli()
