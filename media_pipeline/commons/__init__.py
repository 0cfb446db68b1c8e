"""Commons package - settings, telemetry, retry and storage providers."""
