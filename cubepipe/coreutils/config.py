from dataclasses import dataclass, field
from typing import List, Optional

from cubepipe.coreutils.env import env_bool, env_float, env_get, env_int
from cubepipe.extract.hypercube_extractor import ExtractionOptions
from cubepipe.extract.selection import FieldSelection, parse_selections


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for one extraction pipeline, read from the environment (.env)"""

    object_id: str
    session_factory: Optional[str] = None
    snapshot_path: Optional[str] = None
    selections: List[FieldSelection] = field(default_factory=list)
    page_size: int = 1000
    max_pages: int = 10
    page_delay: float = 0.01
    output_dir: str = "output"
    output_stem: str = "pivot_data"
    schedule_time: str = "06:00"
    verify_selections: bool = True

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """
        Load configuration from CUBEPIPE_* environment variables

        Raises:
            ValueError: Listing every missing required setting
        """
        object_id = env_get("CUBEPIPE_OBJECT_ID")
        session_factory = env_get("CUBEPIPE_SESSION_FACTORY")
        snapshot_path = env_get("CUBEPIPE_SNAPSHOT_PATH")

        missing = []
        if not object_id:
            missing.append("CUBEPIPE_OBJECT_ID")
        if not session_factory and not snapshot_path:
            missing.append("CUBEPIPE_SESSION_FACTORY or CUBEPIPE_SNAPSHOT_PATH")
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return cls(
            object_id=object_id,
            session_factory=session_factory,
            snapshot_path=snapshot_path,
            selections=parse_selections(env_get("CUBEPIPE_SELECTIONS", "")),
            page_size=env_int("CUBEPIPE_PAGE_SIZE", 1000),
            max_pages=env_int("CUBEPIPE_MAX_PAGES", 10),
            page_delay=env_float("CUBEPIPE_PAGE_DELAY", 0.01),
            output_dir=env_get("CUBEPIPE_OUTPUT_DIR", "output"),
            output_stem=env_get("CUBEPIPE_OUTPUT_STEM", "pivot_data"),
            schedule_time=env_get("CUBEPIPE_SCHEDULE_TIME", "06:00"),
            verify_selections=env_bool("CUBEPIPE_VERIFY_SELECTIONS", True),
        )

    def extraction_options(self) -> ExtractionOptions:
        return ExtractionOptions(
            page_size=self.page_size,
            max_pages=self.max_pages,
            page_delay=self.page_delay,
        )
