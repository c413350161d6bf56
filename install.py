#!/usr/bin/env python3
"""Set up a local riyl-chat checkout.

Usage:
    python install.py          # runtime only
    python install.py --dev    # with pytest
"""

import shutil
import subprocess
import sys
from pathlib import Path

MIN_PYTHON = (3, 11)
ROOT = Path(__file__).resolve().parent
VENV = ROOT / ".venv"
BIN = VENV / ("Scripts" if sys.platform == "win32" else "bin")


def main() -> None:
    if sys.version_info < MIN_PYTHON:
        sys.exit(f"riyl-chat needs Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]} or newer.")

    if not VENV.is_dir():
        subprocess.check_call([sys.executable, "-m", "venv", str(VENV)])

    target = ".[dev]" if "--dev" in sys.argv else "."
    subprocess.check_call([str(BIN / "pip"), "install", "-e", target], cwd=ROOT)

    for example, live in (("config.example.yaml", "config.yaml"), (".env.example", ".env")):
        if not (ROOT / live).exists():
            shutil.copy(ROOT / example, ROOT / live)
            print(f"wrote {live}")

    # Fails loudly if the copied config does not validate
    subprocess.check_call([str(BIN / "riyl-chat"), "config-check"], cwd=ROOT)

    print(f"\nSet OPENAI_API_KEY in .env, then run '{BIN / 'riyl-chat'} serve'")
    print(f"and, in a second terminal, '{BIN / 'riyl-chat'} chat'.")


if __name__ == "__main__":
    main()
