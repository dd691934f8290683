"""
Report writer for ERD runs.

Writes the diagram text and a YAML summary of schemas, relationships and
junction tables to an output directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import yaml

from mongo_erd.models import ErdResult

logger = logging.getLogger(__name__)

DIAGRAM_FILE = "erd.mmd"
REPORT_FILE = "relationships.yaml"


class ReportWriter:
    """Persists the artifacts of one run."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def write(self, result: ErdResult) -> Dict[str, Path]:
        """
        Write diagram and YAML report.

        Returns:
            Dict of artifact kind -> written path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        paths: Dict[str, Path] = {}

        if result.diagram is not None:
            paths["diagram"] = self.write_diagram(result.diagram)

        report_path = self.output_dir / REPORT_FILE
        with open(report_path, "w") as f:
            yaml.safe_dump(result.to_dict(), f, default_flow_style=False, sort_keys=False)
        paths["report"] = report_path

        logger.info(f"Wrote {len(paths)} files to {self.output_dir}")
        return paths

    def write_diagram(self, diagram: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / DIAGRAM_FILE
        path.write_text(diagram)
        return path
