"""
Minimal smoke test to verify model access with the gap-analysis call.

Usage:
  export OPENAI_API_KEY=your_key
  uv run python scripts/openai_smoke.py --model gpt-4o-mini --tier TITP
"""
import argparse
import os
import sys
from pathlib import Path

# Ensure repository root is on sys.path for local execution.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from llm.client import OpenAIClient
from llm.pipeline import analyze_gaps
from schemas.resume import VisaTier
from schemas.samples import sample_record
from store.mutations import update_section


def main():
    parser = argparse.ArgumentParser(description="OpenAI gap-analysis smoke test (single record).")
    parser.add_argument("--model", default="gpt-4o-mini", help="Model name to test.")
    parser.add_argument("--tier", default="ENGINEER", choices=[t.value for t in VisaTier])
    args = parser.parse_args()

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise SystemExit("Set OPENAI_API_KEY before running this script.")

    client = OpenAIClient(api_key=api_key, model=args.model)
    # Blank out one field so the model has something to find.
    record = update_section(sample_record(VisaTier(args.tier)), "motivation", {"selfPR": ""})
    result = analyze_gaps(client, record)
    print("Status:", result.status.value)
    if result.analysis:
        for item in result.analysis.missing_fields:
            print(f"- [{item.importance.value}] {item.field}: {item.question}")


if __name__ == "__main__":
    main()
