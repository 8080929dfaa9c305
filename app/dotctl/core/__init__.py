"""Core provisioning logic: settings, ledgers, platform detection and orchestration."""
