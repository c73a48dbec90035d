#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker that consumes builder prompts.
#
# Usage:
#   python scripts/start_worker.py
#   python scripts/start_worker.py --concurrency 4 --queues ai_tasks
#
# Prerequisites:
#   - Redis must be running (REDIS_URL)
#   - Environment variables must be set (.env file)
# =============================================================================

import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the Celery worker."""
    parser = argparse.ArgumentParser(description="Run the Gridbase builder worker")
    parser.add_argument("--concurrency", type=int, default=2, help="Worker processes")
    parser.add_argument("--queues", default="default,ai_tasks", help="Comma-separated queues")
    parser.add_argument("--loglevel", default="info")
    args = parser.parse_args()

    print("=" * 60)
    print("Gridbase Builder Worker")
    print("=" * 60)
    print(f"Queues: {args.queues}  Concurrency: {args.concurrency}")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        f"--loglevel={args.loglevel}",
        f"--concurrency={args.concurrency}",
        "-Q", args.queues,
    ])


if __name__ == "__main__":
    main()
