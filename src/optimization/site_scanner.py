"""
Candidate site generation around the service vessel.

A square lattice (0.5 km spacing) is laid over the scan circle. Points
outside the radius or the configured safe zone, or closer than 0.3 km to an
existing bagan, are discarded. The rest are scored concurrently from
environmental readings; sites scoring at least 70 are kept, best first,
capped at 20.

A point whose readings cannot be obtained gets a neutral score of 75 so a
single failure never aborts the scan.
"""

import asyncio
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from src.optimization.errors import ValidationError
from src.optimization.geo import GeoPoint, degree_steps, distance_km
from src.optimization.models import Bagan, CandidateSite
from src.optimization.optimizer_config import OptimizerConfig
from src.scoring.zone_score import calculate_zone_score

logger = logging.getLogger(__name__)

GRID_SPACING_KM = 0.5
MIN_SEPARATION_KM = 0.3
MIN_SITE_SCORE = 70
MAX_SITES = 20
FALLBACK_SCORE = 75


class CandidateSiteScanner:
    """Generates and scores candidate relocation sites."""

    def __init__(
        self,
        source,
        config: OptimizerConfig,
        grid_spacing_km: float = GRID_SPACING_KM,
        min_separation_km: float = MIN_SEPARATION_KM,
        min_score: float = MIN_SITE_SCORE,
        max_results: int = MAX_SITES,
        fallback_score: int = FALLBACK_SCORE,
        max_concurrency: int = 16,
    ):
        """
        Args:
            source: EnvironmentalDataSource providing reading bundles.
            config: Optimizer configuration (safe zone).
        """
        self.source = source
        self.config = config
        self.grid_spacing_km = grid_spacing_km
        self.min_separation_km = min_separation_km
        self.min_score = min_score
        self.max_results = max_results
        self.fallback_score = fallback_score
        self.max_concurrency = max_concurrency

    def lattice(
        self,
        center: GeoPoint,
        existing: Sequence[Bagan],
        radius_km: float,
    ) -> List[GeoPoint]:
        """Grid points eligible for scoring, in row-major lattice order."""
        steps = math.ceil(radius_km / self.grid_spacing_km)
        dlat, dlng = degree_steps(center, self.grid_spacing_km)
        offsets = np.arange(-steps, steps + 1)
        safe_zone = self.config.safe_zone

        points = []
        for lat_step in offsets:
            for lng_step in offsets:
                point = GeoPoint(
                    float(center.lat + lat_step * dlat),
                    float(center.lng + lng_step * dlng),
                )
                if distance_km(center, point) > radius_km:
                    continue
                if safe_zone is not None and distance_km(safe_zone.center, point) > safe_zone.radius_km:
                    continue
                if any(distance_km(b.position, point) < self.min_separation_km for b in existing):
                    continue
                points.append(point)
        return points

    async def _score_point(
        self,
        point: GeoPoint,
        date,
        semaphore: asyncio.Semaphore,
    ) -> Tuple[float, bool, Optional[dict]]:
        async with semaphore:
            try:
                bundle = await self.source.fetch_bundle(point, date)
                result = calculate_zone_score(bundle)
            except Exception as e:
                logger.warning(
                    f"Could not score ({point.lat:.4f}, {point.lng:.4f}), "
                    f"using fallback score {self.fallback_score}: {e}"
                )
                return self.fallback_score, True, None

        breakdown = {
            name: {"score": f.score, "max": f.max, "rating": f.rating, "source": f.source}
            for name, f in result.breakdown.items()
        }
        return result.total, result.degraded, breakdown

    async def scan(
        self,
        vessel_position: GeoPoint,
        existing: Sequence[Bagan],
        radius_km: float,
        date,
    ) -> List[CandidateSite]:
        """Return up to ``max_results`` scored sites around *vessel_position*."""
        if not isinstance(radius_km, (int, float)) or not math.isfinite(radius_km) or radius_km <= 0:
            raise ValidationError(f"Scan radius must be a positive number of km, got {radius_km!r}")

        points = self.lattice(vessel_position, existing, radius_km)
        logger.info(f"Scanning {len(points)} grid point(s) within {radius_km:g} km")

        semaphore = asyncio.Semaphore(self.max_concurrency)
        scores = await asyncio.gather(
            *(self._score_point(p, date, semaphore) for p in points)
        )

        sites: List[CandidateSite] = []
        for point, (score, degraded, breakdown) in zip(points, scores):
            if score < self.min_score:
                continue
            number = len(sites) + 1
            sites.append(CandidateSite(
                id=f"SPOT_{number}",
                name=f"Candidate {number}",
                position=GeoPoint(round(point.lat, 4), round(point.lng, 4)),
                score=score,
                degraded=degraded,
                breakdown=breakdown,
            ))

        sites.sort(key=lambda s: s.score, reverse=True)
        degraded_count = sum(1 for s in sites if s.degraded)
        logger.info(
            f"Found {len(sites)} candidate site(s) scoring >= {self.min_score:g}"
            + (f" ({degraded_count} on estimated data)" if degraded_count else "")
        )
        return sites[:self.max_results]
