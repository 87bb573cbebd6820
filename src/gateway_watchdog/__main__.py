"""Allow running as ``python -m gateway_watchdog``."""

from gateway_watchdog.cli import main

if __name__ == "__main__":
    main()
