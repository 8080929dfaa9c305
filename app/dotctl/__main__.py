"""Allow running dotctl with ``python -m dotctl``."""

from dotctl.cli.main import app

app(prog_name="dotctl")
