# scripts/smoke.py
"""
Smoke Test Script for the adohistory pipeline against a live organization.

Usage
-----
1. Put ADO_PAT and ADO_ORG in `.env` (or export them), then:
    $ python scripts/smoke.py --id 3421

2. Track a single field and keep the per-revision detail dumps:
    $ python scripts/smoke.py --id 3421 --track System.State --details
"""

import argparse
import logging
import sys
import tempfile
import traceback
from pathlib import Path

from dotenv import load_dotenv

from adohistory.ado.client import WorkItemClient
from adohistory.core.settings import load_settings
from adohistory.pipelines.history_report import run_history_report

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")
else:
    print("⚠️  Warning: No .env file found! ADO_PAT / ADO_ORG must be exported.")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run adohistory Smoke Test")
    parser.add_argument("--id", type=int, required=True, help="Work item ID")
    parser.add_argument("--track", type=str, default=None, help="Field to track")
    parser.add_argument("--details", action="store_true", help="Write revision detail files")
    parser.add_argument("--out", type=str, default=None, help="Output folder (default: temp)")
    args = parser.parse_args()

    settings = load_settings()
    try:
        client = WorkItemClient.from_settings(settings)
    except ValueError as exc:
        print(f"❌ {exc}")
        return

    output_dir = Path(args.out) if args.out else Path(tempfile.mkdtemp(prefix="adohistory-"))
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        print(f"... Invoking run_history_report() for item {args.id} ...")
        report = run_history_report(
            client,
            args.id,
            output_dir,
            track_field=args.track,
            detail_dir=output_dir if args.details else None,
            page_size=settings.page_size,
        )
    except Exception as exc:
        print(f"\n❌ Pipeline Crashed: {exc}")
        traceback.print_exc()
        return

    print("\n" + "=" * 60)
    print("✅ Pipeline Finished Successfully!")
    print("=" * 60)

    scan = report["scan"]
    print(f"\n📚 Revisions retrieved: {report['revision_count']}")
    print(f"📝 Change entries: {len(scan.entries)}")
    for label, value in scan.pairs()[:15]:
        print(f"  {label}: {value}" if label else f"  {value}")
    if report["detail_paths"]:
        print(f"\n🗂️  Detail files: {len(report['detail_paths'])}")

    print(f"\n💾 Report saved to: {report['report_path']}")


if __name__ == "__main__":
    main()
