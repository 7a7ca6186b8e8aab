"""CLI entry point for qtum_contract.cli module.

Enables execution via: python -m qtum_contract.cli
"""

from qtum_contract.cli.watch_logs import main

if __name__ == "__main__":
    raise SystemExit(main())
