#!/usr/bin/env python3
"""Post-installation check: Playwright Chromium and the Lighthouse CLI."""

import shutil
import subprocess
import sys


def install_chromium() -> bool:
    """Install the Chromium build the launcher drives over CDP."""
    print("Installing Playwright Chromium...", file=sys.stderr)
    try:
        subprocess.run(
            [sys.executable, "-m", "playwright", "install", "chromium"],
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print(f"Failed to install Playwright Chromium: {e}", file=sys.stderr)
        print("You can manually install by running: playwright install chromium", file=sys.stderr)
        return False
    except FileNotFoundError:
        print("Playwright not found. Install the package dependencies first.", file=sys.stderr)
        return False
    return True


def lighthouse_available() -> bool:
    """Audits shell out to the Lighthouse CLI; it has to be on PATH."""
    if shutil.which("lighthouse") is None:
        print(
            "Lighthouse CLI not found in PATH. Install it with: npm install -g lighthouse",
            file=sys.stderr,
        )
        return False
    return True


def main() -> int:
    ok = install_chromium()
    ok = lighthouse_available() and ok
    if ok:
        print("mcp-optimizer is ready to run audits.", file=sys.stderr)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
