import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from release_report.agent.errors import ReportError
from release_report.agent.report_orchestrator import generate_report
from release_report.models.settings import ReportSettings


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Summarize what shipped in GITHUB_REPO between two dates."
    )
    parser.add_argument("start", help="First day, YYYY-MM-DD (inclusive)")
    parser.add_argument("end", help="Last day, YYYY-MM-DD (inclusive)")
    return parser.parse_args(argv)


async def run(start: str, end: str) -> int:
    try:
        settings = ReportSettings.from_env()
        report = await generate_report(start, end, settings)
    except ReportError as error:
        print(f"[{error.status_code}] {error.message}", file=sys.stderr)
        return 1

    print(json.dumps(report.to_response(), indent=2))
    return 0


def main(argv=None) -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    args = parse_args(argv)
    return asyncio.run(run(args.start, args.end))


if __name__ == "__main__":
    sys.exit(main())
