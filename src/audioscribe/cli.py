"""audioscribe command-line interface.

Usage:
    audioscribe-cli transcribe <audio-url> [--webhook URL]
    audioscribe-cli status <job-id>
"""

import argparse
import asyncio
import json
import sys

from audioscribe.config import settings
from audioscribe.errors import AudioscribeError
from audioscribe.jobs.models import JobStatus
from audioscribe.main import build_orchestrator, configure_logging
from audioscribe.storage.sqlite import SQLiteJobStorage


async def cmd_transcribe(args: argparse.Namespace) -> int:
    """Create a job, wait for it and print the final record."""
    settings.ensure_directories()
    orchestrator, storage, webhook_client = build_orchestrator(settings)
    try:
        job = await orchestrator.create_job(args.url, args.webhook)
        print(f"Job {job.id} created, waiting for completion...", file=sys.stderr)
        await orchestrator.wait_for_job(job.id)
        final = await orchestrator.get_job(job.id)
    finally:
        await webhook_client.shutdown()
        await storage.close()

    if final is None:
        print(f"Error: job {job.id} disappeared from storage", file=sys.stderr)
        return 1
    print(json.dumps(final.to_dict(), indent=2, ensure_ascii=False))
    return 0 if final.status == JobStatus.COMPLETED else 1


async def cmd_status(args: argparse.Namespace) -> int:
    """Print a stored job."""
    storage = SQLiteJobStorage(settings.database_path)
    try:
        job = await storage.get_job(args.job_id)
    finally:
        await storage.close()

    if job is None:
        print(f"Error: job not found: {args.job_id}", file=sys.stderr)
        return 1
    print(json.dumps(job.to_dict(), indent=2, ensure_ascii=False))
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="audioscribe-cli",
        description="audioscribe - audio transcription jobs",
    )
    subparsers = parser.add_subparsers(dest="command", help="available commands")

    p_transcribe = subparsers.add_parser("transcribe", help="transcribe a remote audio file")
    p_transcribe.add_argument("url", type=str, help="audio file URL")
    p_transcribe.add_argument("--webhook", type=str, help="webhook notified on completion")

    p_status = subparsers.add_parser("status", help="show a stored job")
    p_status.add_argument("job_id", type=str, help="job id")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(settings.log_level)

    try:
        if args.command == "transcribe":
            code = asyncio.run(cmd_transcribe(args))
        elif args.command == "status":
            code = asyncio.run(cmd_status(args))
    except AudioscribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
