"""Entry point for running the invoice editor CLI from a source checkout."""
import sys
from pathlib import Path

# Ensure the invoice_editor package is importable
root = Path(__file__).parent.resolve()
sys.path.insert(0, str(root))

from invoice_editor.cli.main import main

if __name__ == "__main__":
    main()
