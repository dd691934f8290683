"""
ERD Pipeline - Sample, infer, detect and render in one pass.

Each collection is sampled exactly once; the sample feeds both the schema
inferer and the identifier indexer. Once all collections are folded the
relationship detector, junction classifier and renderer run on the
complete in-memory state. Nothing is persisted between runs.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional

from tqdm import tqdm

from mongo_erd.discovery.identifier_indexer import IdentifierIndexer
from mongo_erd.discovery.junction import JunctionClassifier
from mongo_erd.discovery.relationship_detector import RelationshipDetector
from mongo_erd.discovery.schema_inferer import SchemaInferer
from mongo_erd.exceptions import ConnectivityError
from mongo_erd.models import ErdConfig, ErdResult
from mongo_erd.output.mermaid import DiagramRenderer

logger = logging.getLogger(__name__)

# Always-valid diagram returned when generation fails
FALLBACK_DIAGRAM = 'erDiagram\n    ERROR { string message "Check console logs" }'

Document = Mapping[str, Any]


class ErdPipeline:
    """
    Runs one ERD generation against a metadata extractor.

    The extractor must provide ``list_collections(db_name)`` and
    ``sample_collection(db_name, collection, limit)``.

    Usage:
        with MongoMetadataExtractor(config.url) as extractor:
            result = ErdPipeline(extractor, config).run()
            print(result.diagram)
    """

    def __init__(
        self,
        extractor: Any,
        config: ErdConfig,
        show_progress: bool = False,
    ):
        """
        Initialize the pipeline.

        Args:
            extractor: Database collaborator (see class docstring)
            config: Resolved run configuration
            show_progress: Display a tqdm progress bar while sampling
        """
        self.extractor = extractor
        self.config = config
        self.show_progress = show_progress

        self.schema_inferer = SchemaInferer(max_depth=config.max_depth)
        self.indexer = IdentifierIndexer(max_depth=config.max_depth)
        self.detector = RelationshipDetector()
        self.junction_classifier = JunctionClassifier(
            max_fields=config.junction_max_fields,
            min_relationships=config.junction_min_relationships,
        )
        self.renderer = DiagramRenderer()

    def run(self) -> ErdResult:
        """
        Generate the ERD.

        Returns:
            ErdResult with schemas, index, relationships, junctions and diagram
        """
        result = self.collect()

        logger.info("Detecting relationships...")
        result.relationships = self.detector.detect(result.identifier_index)
        result.junction_tables = self.junction_classifier.classify(
            result.relationships, result.schemas
        )

        logger.info(f"Found {len(result.relationships)} relationships")
        logger.info(f"Found {len(result.junction_tables)} junction tables")

        result.diagram = self.renderer.render(
            result.schemas, result.relationships, result.junction_tables
        )
        return result

    def collect(self) -> ErdResult:
        """Sample every collection and fold the samples in sorted name order."""
        db_name = self.config.db_name
        names = sorted(self.extractor.list_collections(db_name))
        logger.info(f"Analyzing {len(names)} collections in {db_name}")

        samples = self._fetch_samples(names)

        result = ErdResult(db_name=db_name)
        for name in names:
            docs = samples.pop(name)
            result.schemas[name] = self.schema_inferer.infer(docs)
            result.identifier_index[name] = self.indexer.index(docs)
            logger.debug(f"{name}: {len(docs)} documents, {len(result.schemas[name])} fields")

        return result

    def _fetch_samples(self, names: List[str]) -> Dict[str, List[Document]]:
        db_name = self.config.db_name
        limit = self.config.sample_size
        workers = min(self.config.max_workers, len(names) or 1)

        progress = tqdm(total=len(names), desc="Sampling collections", disable=not self.show_progress)
        samples: Dict[str, List[Document]] = {}
        try:
            if workers <= 1:
                for name in names:
                    samples[name] = self.extractor.sample_collection(db_name, name, limit)
                    progress.update(1)
            else:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    futures = {
                        name: executor.submit(self.extractor.sample_collection, db_name, name, limit)
                        for name in names
                    }
                    for name in names:
                        samples[name] = futures[name].result()
                        progress.update(1)
        finally:
            progress.close()

        return samples


def generate_erd(
    config: ErdConfig,
    extractor: Optional[Any] = None,
    show_progress: bool = False,
) -> str:
    """
    Generate Mermaid ERD text for the configured database.

    Connectivity failures propagate to the caller. Any other failure is
    logged and replaced by FALLBACK_DIAGRAM so the output is always
    valid diagram syntax.

    Args:
        config: Resolved run configuration
        extractor: Optional already-built extractor; a MongoMetadataExtractor
            is created (and closed) for the call when omitted
        show_progress: Display a progress bar while sampling

    Returns:
        Diagram text
    """
    owns_extractor = extractor is None
    if owns_extractor:
        from mongo_erd.metadata import MongoMetadataExtractor
        extractor = MongoMetadataExtractor(config.url)
        extractor.connect()

    try:
        return ErdPipeline(extractor, config, show_progress=show_progress).run().diagram
    except ConnectivityError:
        raise
    except Exception:
        logger.exception("Error generating ERD")
        return FALLBACK_DIAGRAM
    finally:
        if owns_extractor:
            extractor.disconnect()
