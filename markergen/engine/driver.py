"""Run driver for marker dataset generation.

The Driver walks the discovered marker sources, decodes each one and pushes
it through the augmentation chain. Sources are independent, so they can be
spread over worker threads; the only state they share is the Save stage's
index counter, which is atomic.

Example:
    >>> from markergen.engine import build_driver
    >>> from markergen.configs import get_default_config
    >>>
    >>> driver = build_driver(get_default_config())
    >>> summary = driver.run()
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, List, Optional

from ..data.datasets import MarkerDataset
from ..data.io import DecodeError
from ..data.transforms import Chain, Preview, Save, build_pipeline
from ..utils.counter import IndexCounter


logger = logging.getLogger("markergen.driver")


@dataclass
class RunSummary:
    """Counts for one finished run."""

    num_sources: int = 0
    num_failed: int = 0
    num_saved: int = 0
    elapsed: float = 0.0

    @property
    def num_processed(self) -> int:
        return self.num_sources - self.num_failed


class Driver:
    """Feed marker sources through an augmentation chain.

    Args:
        pipeline: Linked augmentation chain.
        dataset: Marker sources. May also be passed to :meth:`run`.
        num_workers: Worker threads; 0 processes sources in order on the
            calling thread, which keeps output numbering reproducible.
            Forced to 0 when an enabled Preview is in the chain, since
            OpenCV windows must be driven from the calling thread.

    Attributes:
        pipeline: The augmentation chain.
        counters: Index counters of the chain's Save stages.
    """

    def __init__(
        self,
        pipeline: Chain,
        dataset: Optional[MarkerDataset] = None,
        num_workers: int = 0,
    ) -> None:
        if num_workers < 0:
            raise ValueError(f"num_workers must be non-negative, got {num_workers}")
        if num_workers > 0 and any(stage.enabled for stage in pipeline.find(Preview)):
            logger.warning("Preview is enabled; running without worker threads")
            num_workers = 0
        self.pipeline = pipeline
        self.dataset = dataset
        self.num_workers = num_workers
        self.counters: List[IndexCounter] = [stage.counter for stage in pipeline.find(Save)]

    def _saved_count(self) -> int:
        return sum(counter.value for counter in self.counters)

    def process(self, dataset: MarkerDataset, idx: int) -> bool:
        """Run the chain for one source.

        Returns:
            False if the source could not be decoded and was skipped.
        """
        source = dataset.sources[idx]
        logger.info(f"{source.path} (class {source.class_id})")
        try:
            canvas, context = dataset[idx]
        except DecodeError as e:
            logger.warning(f"Skipping source: {e}")
            return False

        self.pipeline(canvas, context)
        return True

    def run(self, dataset: Optional[MarkerDataset] = None) -> RunSummary:
        """Process every source.

        Args:
            dataset: Sources to process; defaults to the one given at init.

        Returns:
            RunSummary with source, failure and saved-variant counts.

        Raises:
            DirectoryCreateError: If the output directory cannot be created.
                The run stops; remaining sources are not processed.
        """
        dataset = dataset if dataset is not None else self.dataset
        if dataset is None:
            raise ValueError("Driver.run needs a dataset")

        summary = RunSummary(num_sources=len(dataset))
        if len(dataset) == 0:
            logger.warning(f"No marker images found under {dataset.src_root / dataset.markers_dir}")
            return summary

        logger.info(
            f"Processing {len(dataset)} sources, up to "
            f"{self.pipeline.num_variants()} variants each"
        )
        saved_before = self._saved_count()
        start_time = time.time()

        if self.num_workers == 0:
            for idx in range(len(dataset)):
                if not self.process(dataset, idx):
                    summary.num_failed += 1
        else:
            summary.num_failed = self._run_parallel(dataset)

        summary.elapsed = time.time() - start_time
        summary.num_saved = self._saved_count() - saved_before
        logger.info(
            f"Done: {summary.num_saved} variants from {summary.num_processed} sources "
            f"({summary.num_failed} skipped) in {summary.elapsed:.1f}s"
        )
        return summary

    def _run_parallel(self, dataset: MarkerDataset) -> int:
        num_failed = 0
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            futures = [executor.submit(self.process, dataset, idx) for idx in range(len(dataset))]
            try:
                for future in as_completed(futures):
                    if not future.result():
                        num_failed += 1
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
        return num_failed


def build_driver(config: Any, counter: Optional[IndexCounter] = None) -> Driver:
    """Build a Driver, its pipeline and its dataset from configuration.

    Args:
        config: Run configuration (see ``get_default_config``).
        counter: Output index counter; a fresh one starting at 0 if omitted.

    Raises:
        DegenerateRangeError: If a configured range cannot terminate.
        FileNotFoundError: If the markers directory does not exist.
    """
    pipeline = build_pipeline(config, counter=counter)
    dataset = MarkerDataset(config.get("src", "dataset"), config.get("markers_dir", "markers"))
    return Driver(pipeline, dataset, num_workers=config.get("num_workers", 0))
