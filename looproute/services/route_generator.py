# looproute/services/route_generator.py

import asyncio
import math
import random
from time import perf_counter
from typing import List, Optional

import httpx

from looproute.core.config import GenerationConfig, settings
from looproute.core.logger import logger
from looproute.models.routing import GeoPoint, RouteOption
from looproute.services.fallback import generate_fallback_routes
from looproute.services.graphhopper_client import EngineRoute, GraphHopperClient


class InvalidRouteRequest(ValueError):
    """
    Raised when a generation request cannot produce meaningful geometry.
    """


class RouteGenerator:
    """
    High-level loop generation service:
    - fans out a menu of round_trip attempts to the routing engine
    - retries with shorter distance tiers when a tier yields nothing
    - de-duplicates and ranks candidates by closeness to the requested distance
    - falls back to geometric loops when the engine is unavailable
    """

    def __init__(
        self,
        client: Optional[GraphHopperClient] = None,
        config: Optional[GenerationConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.client = client or GraphHopperClient()
        self.config = config or settings.GENERATION
        self.rng = rng or random.Random()
        logger.info(
            f"RouteGenerator initialised (engine configured: {self.client.is_configured})."
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def generate(self, center: GeoPoint, distance_km: float, count: int) -> List[RouteOption]:
        """
        Main entry point for the /routes/loop endpoint.

        Always returns between 1 and `count` options for a valid request;
        only invalid input raises.
        """
        self._validate(distance_km, count)
        t0 = perf_counter()

        logger.info(
            f"Received loop request at ({center.lat:.6f}, {center.lng:.6f}): "
            f"{distance_km:.2f} km, {count} option(s)"
        )

        if not self.client.is_configured:
            logger.warning("Routing engine not configured, using geometric fallback")
            return generate_fallback_routes(center, distance_km, count, self.config)

        async with self.client.http_client() as http:
            for tier in self.config.distance_tiers:
                tier_km = distance_km * tier
                t_tier0 = perf_counter()
                candidates = await self._fetch_candidates(http, center, tier_km)
                logger.info(
                    f"Tier {tier_km:.2f} km: {len(candidates)} candidate(s) "
                    f"in {(perf_counter() - t_tier0) * 1000.0:.2f} ms"
                )

                if candidates:
                    routes = self.select_routes(
                        [self._to_option(candidate, i) for i, candidate in enumerate(candidates)],
                        distance_km,
                        count,
                    )
                    logger.info(
                        f"Generated {len(routes)} route(s) for ~{tier_km:.2f} km "
                        f"in {(perf_counter() - t0) * 1000.0:.2f} ms"
                    )
                    return routes

                logger.warning(f"No routes found for {tier_km:.2f} km, trying shorter distance...")

        logger.warning("All routing engine attempts failed, using geometric fallback")
        return generate_fallback_routes(center, distance_km, count, self.config)

    def select_routes(
        self,
        candidates: List[RouteOption],
        requested_km: float,
        count: int,
    ) -> List[RouteOption]:
        """
        De-duplicate, rank by accuracy and keep the best `count`, renamed.
        """
        unique = self.deduplicate(candidates)
        ranked = sorted(unique, key=lambda r: abs(r.estimated_distance_km - requested_km))

        return [
            route.model_copy(
                update={"id": f"route-opt-{i + 1}", "name": self.route_name(route.ascend)}
            )
            for i, route in enumerate(ranked[:count])
        ]

    def deduplicate(self, candidates: List[RouteOption]) -> List[RouteOption]:
        """
        Keep the first of every group of near-identical candidates.

        Two candidates are the same loop when both their distances and their
        elevation gains are within the configured thresholds.
        """
        unique: List[RouteOption] = []
        for route in candidates:
            is_duplicate = any(
                abs(existing.estimated_distance_km - route.estimated_distance_km)
                < self.config.dedup_distance_km
                and abs(existing.ascend - route.ascend) < self.config.dedup_ascend_m
                for existing in unique
            )
            if not is_duplicate:
                unique.append(route)

        if len(unique) < len(candidates):
            logger.info(f"Dropped {len(candidates) - len(unique)} duplicate candidate(s)")
        return unique

    def route_name(self, ascend: float) -> str:
        if ascend < self.config.flat_max_ascend_m:
            return "Flat course"
        if ascend < self.config.rolling_max_ascend_m:
            return "Rolling course"
        return "Challenging course"

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _validate(self, distance_km: float, count: int) -> None:
        if not math.isfinite(distance_km) or distance_km <= 0:
            raise InvalidRouteRequest(f"distance_km must be positive, got {distance_km}")
        if distance_km > self.config.max_distance_km:
            raise InvalidRouteRequest(
                f"distance_km must be at most {self.config.max_distance_km}, got {distance_km}"
            )
        if count < 1:
            raise InvalidRouteRequest(f"count must be at least 1, got {count}")

    async def _fetch_candidates(
        self,
        http: httpx.AsyncClient,
        center: GeoPoint,
        target_km: float,
    ) -> List[EngineRoute]:
        """
        Fire the whole attempt menu concurrently and wait for every attempt.

        An attempt that raises counts as no candidate; it never fails the batch.
        """
        target_m = target_km * 1000.0
        attempts = [
            self.client.round_trip(
                http,
                center,
                target_m * factor,
                self.rng.randrange(self.config.seed_range) + seed_offset,
            )
            for factor, seed_offset in self.config.attempts
        ]
        results = await asyncio.gather(*attempts, return_exceptions=True)

        candidates: List[EngineRoute] = []
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"Routing attempt raised {result.__class__.__name__}: {result}")
            elif result is not None:
                candidates.append(result)
        return candidates

    @staticmethod
    def _to_option(candidate: EngineRoute, index: int) -> RouteOption:
        path = candidate.path
        return RouteOption(
            id=f"route-{index}",
            name="",
            points=candidate.points,
            estimated_distance_km=path.distance / 1000.0,
            estimated_uphill_gain_m=path.ascend,
            total_time_s=path.time / 1000.0,
            ascend=path.ascend,
            descend=path.descend,
            method="engine",
        )
