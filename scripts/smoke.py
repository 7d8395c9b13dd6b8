# scripts/smoke.py
"""
Smoke Test Script for the Prompt Vault backup engine.

Runs export -> import -> merge against a library (the configured one, or a
small built-in sample) without writing anything back to it, then commits a
version on an in-memory copy to exercise the version store.

Usage
-----
1. Sample library:
    $ uv run python scripts/smoke.py

2. The library configured via PROMPTVAULT_DATA_DIR:
    $ uv run python scripts/smoke.py --live
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from promptvault.core.backup.codec import export_archive, import_archive, summarize
from promptvault.core.backup.merge import merge_backup_data
from promptvault.core.contracts import DataSnapshot, Prompt
from promptvault.core.library import LibraryState, LibraryStorage
from promptvault.core.versions.store import VersionStore

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
SAMPLE = DataSnapshot(
    prompts=[
        Prompt(id="smoke-1", title="Summarizer", content="Summarize [TOPIC] in 3 bullets."),
        Prompt(id="smoke-2", title="Translator", content="Translate the text into [LANGUAGE]."),
    ],
    folders=["General"],
)


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run Prompt Vault Smoke Test")
    parser.add_argument("--live", action="store_true", help="Use the configured library")
    args = parser.parse_args()

    # 1. Load
    data = LibraryStorage().load() if args.live else SAMPLE
    print(f"\n📚 Library: {data.counts()}")

    # 2. Round trip
    text = export_archive(data)
    result = import_archive(text)
    if result.is_err():
        print(f"\n❌ Round trip rejected: {result.unwrap_err()}")
        sys.exit(1)
    restored = result.unwrap()
    print(f"✅ {summarize(restored)}")

    # 3. Self-merge must add nothing
    _, report = merge_backup_data(data, restored)
    print(f"🔁 Self-merge: added={report.added} replaced={report.replaced}")
    if report.total_added:
        print("❌ Self-merge added records")
        sys.exit(1)

    # 4. Versions on an in-memory copy
    if data.prompts:
        store = VersionStore(LibraryState(data))
        target = data.prompts[0]
        store.ensure_baseline(target.id).unwrap()
        sid = store.commit_version(target.id, target.content + "\n(smoke)").unwrap()
        history = store.history(target.id).unwrap()
        print(f"🕒 Committed {sid}; {target.id} now has {len(history)} versions")

    print("\n" + "=" * 60)
    print("✅ Smoke test finished")
    print("=" * 60)


if __name__ == "__main__":
    main()
