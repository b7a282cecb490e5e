#!/usr/bin/env python
"""
Launch the Streamlit quote calculator.

Usage:
    python scripts/run_app.py [--host 0.0.0.0] [--port 8501] [--catalog-dir DIR]

--catalog-dir is handed to the page as LICENSE_QUOTE_CATALOG_DIR, so a
draft catalog can be tried out without touching the packaged CSVs.
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
UI_PATH = PROJECT_ROOT / 'src' / 'license_quote' / 'ui' / 'app_streamlit.py'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Launch the License Quote Calculator UI")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=8501)
    parser.add_argument("--catalog-dir", type=Path, default=None,
                        help="Directory holding items.csv, sub_options.csv and combo_rules.csv")
    parser.add_argument("--headless", action="store_true", help="Do not open a browser tab")
    return parser.parse_args(argv)


def build_command(args) -> list[str]:
    """streamlit invocation for the parsed options."""
    cmd = [
        sys.executable, '-m', 'streamlit', 'run', str(UI_PATH),
        '--server.address', args.host,
        '--server.port', str(args.port),
    ]
    if args.headless:
        cmd += ['--server.headless', 'true']
    return cmd


def build_env(args, base=None) -> dict:
    """Process environment with src importable and the catalog override applied."""
    env = dict(os.environ if base is None else base)
    src_path = str(PROJECT_ROOT / 'src')
    env['PYTHONPATH'] = os.pathsep.join(p for p in (src_path, env.get('PYTHONPATH')) if p)
    if args.catalog_dir is not None:
        env['LICENSE_QUOTE_CATALOG_DIR'] = str(args.catalog_dir.resolve())
    return env


def main(argv=None):
    args = parse_args(argv)

    if not UI_PATH.exists():
        print(f"ERROR: UI module not found at {UI_PATH}")
        sys.exit(1)
    if args.catalog_dir is not None and not (args.catalog_dir / 'items.csv').exists():
        print(f"ERROR: no items.csv in {args.catalog_dir}")
        sys.exit(1)

    cmd = build_command(args)
    print(f"Starting License Quote Calculator on http://{args.host}:{args.port}")
    if args.catalog_dir is not None:
        print(f"  Catalog: {args.catalog_dir}")

    try:
        subprocess.run(cmd, cwd=str(PROJECT_ROOT), env=build_env(args))
    except KeyboardInterrupt:
        print("\nCalculator stopped.")


if __name__ == "__main__":
    main()
