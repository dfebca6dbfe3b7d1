"""Launch the Streamlit invoice editor from a source checkout.

Options are handed to the app through the INVOICE_* environment variables
it reads on start-up, e.g.:

    python run_streamlit.py --profile consulting --port 8502
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).parent.resolve()
APP = ROOT / "invoice_editor" / "web" / "app.py"


def build_env(profile=None, currency=None, base=None):
    """Environment for the app process: package importable, options as INVOICE_* vars."""
    env = dict(os.environ if base is None else base)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(ROOT), env.get("PYTHONPATH")) if p)
    if profile:
        env["INVOICE_PROFILE"] = profile
    if currency:
        env["INVOICE_CURRENCY_SYMBOL"] = currency
    return env


def build_command(port=None, headless=True):
    command = [sys.executable, "-m", "streamlit", "run", str(APP)]
    if port:
        command += ["--server.port", str(port)]
    command += ["--server.headless", "true" if headless else "false"]
    return command


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the invoice editor web app")
    parser.add_argument("--profile", help="Profile for new invoices (sets INVOICE_PROFILE)")
    parser.add_argument("--currency", help="Currency symbol override (sets INVOICE_CURRENCY_SYMBOL)")
    parser.add_argument("--port", type=int, help="Port to serve on (Streamlit default 8501)")
    parser.add_argument("--browser", action="store_true", help="Open a browser window on start")
    args = parser.parse_args(argv)

    # A separate process keeps Streamlit's runtime out of this interpreter
    try:
        completed = subprocess.run(
            build_command(args.port, headless=not args.browser),
            env=build_env(args.profile, args.currency),
            cwd=str(ROOT),
        )
    except KeyboardInterrupt:
        return 0
    return completed.returncode


if __name__ == "__main__":
    sys.exit(main())
