"""Verify that the libraries for PDF generation, preview and export are available."""

from __future__ import annotations

import sys
from typing import List, Tuple


def check_dependencies() -> List[Tuple[str, bool, str]]:
    """Check required dependencies. Returns list of (name, ok, message)."""
    results: List[Tuple[str, bool, str]] = []

    # --- PDF generation ---
    try:
        import fpdf
        results.append(("fpdf2", True, f"OK, version {fpdf.__version__}"))
    except ImportError as e:
        results.append(("fpdf2", False, f"Missing: {e}"))

    try:
        from PIL import Image
        results.append(("Pillow (PIL)", True, "OK"))
    except ImportError as e:
        results.append(("Pillow (PIL)", False, f"Missing: {e}"))

    # --- Preview ---
    try:
        import fitz  # pymupdf
        results.append(("pymupdf (fitz)", True, "OK"))
    except ImportError as e:
        results.append(("pymupdf (fitz)", False, f"Missing: {e}"))

    # --- Invoice files / profiles ---
    try:
        import yaml
        results.append(("PyYAML", True, "OK"))
    except ImportError as e:
        results.append(("PyYAML", False, f"Missing: {e}"))

    # --- Excel export ---
    try:
        import pandas
        results.append(("pandas", True, "OK"))
    except ImportError as e:
        results.append(("pandas", False, f"Missing: {e}"))

    try:
        import openpyxl
        results.append(("openpyxl", True, "OK"))
    except ImportError as e:
        results.append(("openpyxl", False, f"Missing: {e}"))

    # --- Web editor and API ---
    try:
        import streamlit
        results.append(("streamlit (web editor)", True, "OK"))
    except ImportError as e:
        results.append(("streamlit (web editor)", False, f"Missing: {e}"))

    try:
        import fastapi
        results.append(("fastapi (API)", True, "OK"))
    except ImportError as e:
        results.append(("fastapi (API)", False, f"Missing: {e}"))

    return results


def run_check(verbose: bool = True) -> bool:
    """Run dependency check, print report, return True if all OK."""
    results = check_dependencies()
    ok_count = sum(1 for _, ok, _ in results if ok)
    all_ok = ok_count == len(results)

    if verbose:
        print("Dependency check (PDF generation, preview, export, web)\n")
        for name, ok, msg in results:
            if ok and msg == "OK":
                print(f"  {name}: OK")
            else:
                status = "OK" if ok else "MISSING"
                print(f"  {name}: {status}  {msg}")
        print()
        if all_ok:
            print("All checked dependencies are available.")
        else:
            print(f"Problems with {len(results) - ok_count} of {len(results)}. Install missing ones with: pip install -e .")

    return all_ok


if __name__ == "__main__":
    success = run_check(verbose=True)
    sys.exit(0 if success else 1)
