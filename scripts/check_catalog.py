#!/usr/bin/env python
"""
Catalog check pipeline - validates the catalog definitions and runs the tests.

Usage:
    python scripts/check_catalog.py [--catalog-dir DIR] [--skip-tests]
"""
import argparse
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from license_quote.config.settings import Settings
from license_quote.data.build_catalog import build_catalog_report


def main():
    parser = argparse.ArgumentParser(description="Validate catalog definition files")
    parser.add_argument("--catalog-dir", type=Path, default=None)
    parser.add_argument("--skip-tests", action="store_true")
    args = parser.parse_args()

    print("=" * 60)
    print("LICENSE QUOTE CATALOG CHECK")
    print("=" * 60)
    print()
    
    print("[1/2] Loading catalog definitions...")
    report = build_catalog_report(Settings.load(args.catalog_dir))
    
    if report["status"] != "success":
        print("\n❌ CATALOG INVALID")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)
    
    for warning in report["warnings"]:
        print(f"  WARNING: {warning}")
    
    print()
    if args.skip_tests:
        print("[2/2] Tests skipped")
    else:
        print("[2/2] Running quote engine tests...")
        test_result = subprocess.run(
            [sys.executable, '-m', 'pytest', 'tests', '-q', '--tb=short'],
            cwd=Path(__file__).parent.parent
        )
        if test_result.returncode != 0:
            print("\n❌ TESTS FAILED")
            sys.exit(1)
    
    print()
    print("=" * 60)
    print("✅ CATALOG OK")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Catalog hash: {report['catalog_hash']}")
    print(f"  Items: {report['metrics']['item_count']}")
    print(f"  Sub-options: {report['metrics']['sub_option_count']}")
    print(f"  Combo rules: {report['metrics']['combo_rule_count']}")
    print()
    print("Input files:")
    for name, info in report["input_files"].items():
        print(f"  {name}: {info['hash'] or 'missing'}")


if __name__ == "__main__":
    main()
