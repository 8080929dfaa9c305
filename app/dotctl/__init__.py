"""dotctl - reversible dotfile and package provisioning."""

__version__ = "0.1.0"
