from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, Any
from ..config import CacheConfig
from ..runtime.simulator import SimStats
from .logging import get_logger

logger = get_logger(__name__)


def format_summary(stats: SimStats) -> str:
    return f"Hits: {stats.hits}, Misses: {stats.misses}"


def generate_report_json(stats: SimStats, config: CacheConfig) -> Dict[str, Any]:
    """Generates a JSON-compatible dictionary from the run statistics."""
    report_data = {
        "cache": config.name,
        "geometry": {
            "memory_size_bytes": config.memory_size_bytes,
            "block_size_bytes": config.block_size_bytes,
            "associativity": config.associativity,
            "num_sets": config.num_sets,
            "offset_bits": config.offset_bits,
            "index_bits": config.index_bits,
            "tag_bits": config.tag_bits,
        },
        "replacement_policy": config.replacement_policy,
        "prefetch": config.prefetch,
        "hit_rate_pct": f"{stats.hit_rate:.2%}",
    }
    report_data.update(stats.to_dict())
    return report_data


def generate_report(stats: SimStats, config: CacheConfig) -> Path:
    """Writes report.json into config.report_dir and returns its path."""
    report_data = generate_report_json(stats, config)
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / "report.json"
    with open(report_path, "w") as f:
        json.dump(report_data, f, indent=4)

    logger.info(f"Report written to {report_path.absolute()}")
    return report_path
