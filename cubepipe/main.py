"""
Main Entry Point - Hypercube Extraction Pipeline

Provides simple interfaces to run one extraction or the daily scheduler.
"""

import logging

from cubepipe.coreutils.config import PipelineConfig
from cubepipe.coreutils.logging import log_function_call, setup_logging
from cubepipe.orchestration.pipeline import PipelineOrchestrator
from cubepipe.orchestration.scheduler import create_scheduler

logger = logging.getLogger(__name__)


def run_pipeline(dry_run: bool = False) -> dict:
    """
    Run one extraction

    Args:
        dry_run: If True, don't write output files

    Returns:
        dict: Results and statistics
    """
    log_function_call("run_pipeline", dry_run=dry_run)
    logger.info(f"🚀 Running extraction pipeline (dry_run={dry_run})")

    try:
        orchestrator = PipelineOrchestrator(PipelineConfig.from_env(), dry_run=dry_run)
        return orchestrator.run()

    except Exception as e:
        logger.error(f"❌ Pipeline failed: {e}")
        raise


def run_scheduler(dry_run: bool = False):
    """
    Run the extraction scheduler

    Args:
        dry_run: If True, don't write output files
    """
    logger.info(f"📅 Starting scheduler (dry_run={dry_run})")

    scheduler = create_scheduler(dry_run=dry_run)

    try:
        scheduler.start()
    except KeyboardInterrupt:
        logger.info("🛑 Scheduler stopped by user")
        scheduler.stop()


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Hypercube Extraction Pipeline")
    parser.add_argument("command", choices=["run", "schedule"], help="Command to run")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run in dry-run mode (no output files)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.command == "run":
        try:
            results = run_pipeline(args.dry_run)
        except Exception:
            return 1
        metadata = results["metadata"]
        print(
            f"✅ Pipeline completed: {metadata['terminationReason']}, "
            f"{metadata['extractedRows']}/{metadata['totalRows']} rows"
        )

    elif args.command == "schedule":
        run_scheduler(args.dry_run)

    return 0


if __name__ == "__main__":
    exit(main())
