"""
Scheduler - Orchestration Layer

Pure workflow coordination for scheduled extraction runs.
"""

import schedule
import time
from typing import Optional
from cubepipe.coreutils.config import PipelineConfig
from .pipeline import PipelineOrchestrator
import logging

logger = logging.getLogger(__name__)


class ExtractionScheduler:
    """Runs the extraction pipeline once a day at the configured time"""

    def __init__(
        self,
        config: PipelineConfig,
        dry_run: bool = False,
        orchestrator: Optional[PipelineOrchestrator] = None,
    ):
        self.config = config
        self.dry_run = dry_run
        self.orchestrator = orchestrator or PipelineOrchestrator(config, dry_run=dry_run)
        self.running = False

    def run_daily_extraction(self):
        """Daily: extract the configured object and export it"""
        logger.info("🔄 Running daily extraction...")

        try:
            results = self.orchestrator.run()
            logger.info(
                f"✅ Daily extraction completed: "
                f"{results['metadata']['terminationReason']}, "
                f"{results['metadata']['extractedRows']} rows"
            )
            return results

        except Exception as e:
            logger.error(f"❌ Daily extraction failed: {e}")
            raise

    def start(self):
        """Start the scheduler"""
        logger.info("🚀 Starting extraction scheduler...")

        schedule.every().day.at(self.config.schedule_time).do(self.run_daily_extraction)

        self.running = True
        logger.info(f"📅 Scheduler started - Daily: {self.config.schedule_time}")

        try:
            while self.running:
                schedule.run_pending()
                time.sleep(60)  # Check every minute

        except KeyboardInterrupt:
            logger.info("🛑 Scheduler stopped by user")
            self.running = False

        finally:
            schedule.clear()

    def stop(self):
        """Stop the scheduler"""
        logger.info("🛑 Stopping scheduler...")
        self.running = False

    def run_now(self):
        """Run the extraction immediately"""
        logger.info("🔄 Running extraction now...")
        results = self.run_daily_extraction()
        logger.info("✅ Extraction run completed")
        return results


def create_scheduler(
    config: Optional[PipelineConfig] = None, dry_run: bool = False
) -> ExtractionScheduler:
    """
    Create a new extraction scheduler

    Args:
        config: Pipeline configuration (read from the environment when omitted)
        dry_run: If True, don't write output files

    Returns:
        ExtractionScheduler: New scheduler instance
    """
    return ExtractionScheduler(config or PipelineConfig.from_env(), dry_run=dry_run)
