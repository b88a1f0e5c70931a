"""
Pipeline Orchestrator - Extraction Workflow

One run of the pipeline:
1. Apply field selections (each field restricted to one value)
2. Extract the object's hypercube page by page
3. Validate and format the result into a record set
4. Export JSON, CSV and Parquet (skipped in dry-run mode)

Partial extractions (capped, aborted, cancelled) are exported too; the
termination reason travels with the metadata.
"""

import importlib
import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from cubepipe.coreutils.config import PipelineConfig
from cubepipe.extract.engine_api import EngineSession
from cubepipe.extract.hypercube_extractor import extract_object
from cubepipe.extract.selection import (
    SelectionError,
    SelectionService,
    apply_selections,
    verify_selections,
)
from cubepipe.extract.snapshot_session import SnapshotEngineSession
from cubepipe.load.local_storage import save_extraction_outputs
from cubepipe.transformation.record_formatter import MEASURE, format_records
from cubepipe.transformation.transformers import (
    create_clean_measure_frame,
    get_summary_stats,
)
from cubepipe.transformation.validators import (
    validate_data_quality,
    validate_extraction_result,
    validate_record_set,
)

logger = logging.getLogger(__name__)


def load_session_factory(path: str):
    """
    Resolve a "package.module:callable" session factory

    Args:
        path: Import path of a callable returning an EngineSession

    Returns:
        Callable: The factory
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Session factory must look like 'module:callable', got {path!r}")

    module = importlib.import_module(module_name)
    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise ValueError(f"{path!r} does not name a callable")
    return factory


class PipelineOrchestrator:
    """Orchestrates selections, extraction, formatting and export"""

    def __init__(
        self,
        config: PipelineConfig,
        session: Optional[EngineSession] = None,
        selection_service: Optional[SelectionService] = None,
        dry_run: bool = False,
    ):
        """
        Initialize the Pipeline orchestrator

        Args:
            config: Pipeline configuration
            session: Engine session to use; built from config per run when omitted
            selection_service: Selection collaborator; the session is used when it
                implements SelectionService
            dry_run: If true, skip writing output files
        """
        self.config = config
        self.session = session
        self.selection_service = selection_service
        self.dry_run = dry_run
        self.last_run: Optional[Dict[str, Any]] = None

        if self.dry_run:
            logger.info("🔍 DRY RUN MODE: output files will not be written")

    def _open_session(self) -> EngineSession:
        if self.config.session_factory:
            logger.info(f"Creating engine session via {self.config.session_factory}")
            return load_session_factory(self.config.session_factory)()
        logger.info(f"Creating snapshot session from {self.config.snapshot_path}")
        return SnapshotEngineSession.from_file(self.config.snapshot_path)

    def _selection_service_for(self, session: EngineSession) -> Optional[SelectionService]:
        if self.selection_service is not None:
            return self.selection_service
        if isinstance(session, SelectionService):
            return session
        return None

    def run(self, cancel_event: Optional[threading.Event] = None) -> Dict[str, Any]:
        """
        Run one extraction

        Args:
            cancel_event: Set it to stop extraction between pages

        Returns:
            dict: Extraction metadata, summary statistics and output paths
        """
        logger.info(f"🚀 Starting extraction pipeline for object {self.config.object_id}")
        logger.info("=" * 50)

        owns_session = self.session is None
        session = self._open_session() if owns_session else self.session

        try:
            # Step 1: Field selections
            if self.config.selections:
                logger.info("🔄 Step 1: Applying field selections...")
                service = self._selection_service_for(session)
                if service is None:
                    raise SelectionError(
                        f"{len(self.config.selections)} selections configured but the "
                        f"session offers no selection service"
                    )
                apply_selections(service, self.config.selections)
                if self.config.verify_selections:
                    verify_selections(service, self.config.selections)
            else:
                logger.info("🔄 Step 1: No field selections configured")

            # Step 2: Extract
            logger.info("🔄 Step 2: Extracting hypercube...")
            result = extract_object(
                session,
                self.config.object_id,
                self.config.extraction_options(),
                cancel_event,
            )
            validate_extraction_result(result)

            # Step 3: Format
            logger.info("🔄 Step 3: Formatting records...")
            record_set = format_records(result)
            validate_record_set(record_set)

            clean_df = create_clean_measure_frame(record_set)
            validate_data_quality(clean_df, "clean_measures")
            stats = get_summary_stats(clean_df, record_set.header_names(MEASURE))

            # Step 4: Save
            outputs: Dict[str, str] = {}
            if not self.dry_run:
                logger.info("🔄 Step 4: Saving outputs...")
                outputs = save_extraction_outputs(
                    record_set, self.config.output_dir, self.config.output_stem
                )
            else:
                logger.info("🔍 DRY RUN: Skipping file export")

            metadata = result.metadata
            if metadata.is_complete:
                logger.info(
                    f"✅ Extracted {metadata.extracted_rows} rows, "
                    f"{record_set.summary.total_columns} columns"
                )
            else:
                logger.warning(
                    f"⚠️ Extraction ended {metadata.termination_reason.value}: "
                    f"{metadata.extracted_rows} of {metadata.total_rows} rows"
                )

            self.last_run = {
                "timestamp": datetime.now().isoformat(),
                "metadata": metadata.to_dict(),
                "summary": record_set.to_dict()["summary"],
                "measure_stats": stats,
                "outputs": outputs,
            }
            return self.last_run

        except Exception as e:
            logger.error(f"❌ Extraction pipeline failed: {e}")
            raise

        finally:
            if owns_session:
                session.close()

    def get_pipeline_status(self) -> dict:
        """
        Get current pipeline status

        Returns:
            dict: Pipeline status information
        """
        return {
            "timestamp": datetime.now().isoformat(),
            "dry_run": self.dry_run,
            "object_id": self.config.object_id,
            "selections": [
                f"{s.field_name}={s.value}" for s in self.config.selections
            ],
            "session_source": self.config.session_factory or self.config.snapshot_path,
            "last_termination": (
                self.last_run["metadata"]["terminationReason"] if self.last_run else None
            ),
        }


def main():
    """Main entry point for command line usage"""
    import argparse

    parser = argparse.ArgumentParser(description="Hypercube Extraction Pipeline")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run in dry-run mode (no output files)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        orchestrator = PipelineOrchestrator(PipelineConfig.from_env(), dry_run=args.dry_run)
        orchestrator.run()
        logger.info("✅ Pipeline completed successfully")
        return 0

    except Exception as e:
        logger.error(f"❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
