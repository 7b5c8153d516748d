"""Rotation-aware pattern matching over CAD entities.

Given a seed pattern (a cluster of entities), find every other place in the
drawing where the same cluster appears, translated and rotated by an
arbitrary angle.

Algorithm outline:
    1. The seed entity with the largest characteristic size becomes the
       primary anchor; the seed entity farthest from it becomes the
       orientation reference.
    2. Every unclaimed corpus entity whose signature matches the primary
       anchor is a candidate anchor A.
    3. Each corpus entity R near A that matches the reference and sits at
       the reference distance yields one rotation hypothesis
       ``atan2(R - A) - ref_angle``. Single-entity seeds use only 0.
    4. For each hypothesis, every remaining seed member is rotated about
       the anchor, translated to A and looked up in the spatial grid.
       A single miss abandons the hypothesis.
    5. The first hypothesis that yields a complete, well-spaced cluster is
       accepted and its entities are claimed for the rest of the run.

Acceptance is greedy and order dependent: hypotheses are tried in grid scan
order and the first complete cluster wins, per anchor, with anchors taken
in corpus order. On symmetric parts this decides which rotation is
reported.
"""

from __future__ import annotations

import logging
import math
import threading
import uuid
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from .. import config
from ..lib.logUtils import log
from ..models.component import Component, MatchResult, normalize_degrees, normalize_radians
from ..models.entity import Bounds, Entity
from ..models.settings import MatchSettings
from ..models.types import Point2D
from .geometry import angle_of, distance_between_points, rotate_vector
from .signatures import EntitySignature, characteristic_size, signature_of, signatures_match
from .spatial_index import SpatialGrid, dynamic_tolerance, grid_cell_size
from .tolerances import REFERENCE_BAND_FACTOR, REFERENCE_SEARCH_PAD_FACTOR


class CancellationToken:
    """Thread-safe flag checked by MatchSession between anchor batches."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True, slots=True)
class RotationHypothesis:
    """One candidate orientation for a cluster around an anchor.

    Attributes:
        delta_theta: Rotation relative to the seed, radians (not normalized)
        reference_id: Corpus entity that produced the hypothesis, None for
            the fixed hypothesis of single-entity seeds
    """

    delta_theta: float
    reference_id: str | None = None


@dataclass(frozen=True, slots=True)
class _SeedMember:
    entity: Entity
    signature: EntitySignature
    offset: Point2D  # center offset from the primary anchor


def _angular_distance(a: float, b: float) -> float:
    """Smallest absolute difference between two angles, radians."""
    return abs((a - b + math.pi) % (2 * math.pi) - math.pi)


def _generate_id() -> str:
    """Generate a unique ID."""
    return str(uuid.uuid4())[:8]


def _unique_entities(entities: Iterable[Entity]) -> list[Entity]:
    seen: set[str] = set()
    unique: list[Entity] = []
    for entity in entities:
        if entity.id not in seen:
            seen.add(entity.id)
            unique.append(entity)
    return unique


class MatchSession:
    """
    State of one matching invocation.

    The session never mutates its inputs. Accepted clusters accumulate in
    ``results``; anchors are consumed through a cursor so a cancelled run
    can be resumed by calling ``run`` or ``iter_batches`` again.
    """

    def __init__(
        self,
        seed_entities: Sequence[Entity],
        corpus: Iterable[Entity],
        seed_component: Component,
        existing_matches: Sequence[Component] = (),
        settings: MatchSettings | None = None,
        region: Bounds | None = None,
    ) -> None:
        """
        Prepare a matching run.

        Args:
            seed_entities: Flattened entities of the seed (nested groups
                already expanded)
            corpus: Every entity in the drawing
            seed_component: The seed group, used for its name, centroid
                and bounds
            existing_matches: Matches previously derived from this seed;
                their entities are excluded and their centroids count
                for the spacing check
            settings: Tuning parameters (defaults when None)
            region: Optional search region in absolute CAD units; only
                entities centered inside it are considered
        """
        self.seed_component = seed_component
        self.settings = settings or MatchSettings()
        self.region = region
        self.cancelled = False

        self._existing = list(existing_matches)
        self._accepted: list[MatchResult] = []
        self._used: set[str] = set()
        self._signatures: dict[str, EntitySignature] = {}
        self._cursor = 0

        self._seed = _unique_entities(seed_entities)
        if not self._seed:
            self._anchors: list[Entity] = []
            return

        seed_ids = {e.id for e in self._seed}
        claimed = set(seed_ids)
        for match in self._existing:
            claimed.update(match.entity_ids)

        seed_bounds = seed_component.bounds or Bounds.union_all(e.bounds for e in self._seed)
        self.tolerance = dynamic_tolerance(seed_bounds, self.settings.position_fuzziness)
        self.cell_size = grid_cell_size(self.tolerance)

        self._primary_index = self._select_primary_anchor()
        primary = self._seed[self._primary_index]
        primary_center = primary.center_point()
        self._primary = self._member(primary, primary_center)
        self._others = [
            self._member(e, primary_center)
            for i, e in enumerate(self._seed) if i != self._primary_index
        ]

        self._reference = self._select_reference()
        if self._reference is not None:
            self.ref_distance = math.hypot(*self._reference.offset)
            self.ref_angle = angle_of((0.0, 0.0), self._reference.offset)
        else:
            self.ref_distance = 0.0
            self.ref_angle = 0.0

        # Claimed entities are excluded up front rather than per query
        unclaimed = [
            e for e in _unique_entities(corpus)
            if e.id not in claimed and (region is None or region.contains(e.center_point()))
        ]
        self._grid = SpatialGrid(self.cell_size, unclaimed)
        self._anchors = [e for e in unclaimed if e.kind == primary.kind]

        log(
            f"MatchSession: seed={seed_component.name!r} size={len(self._seed)} "
            f"candidates={len(unclaimed)} anchors={len(self._anchors)} "
            f"tolerance={self.tolerance:.4f} cell={self.cell_size:.2f}",
            logging.DEBUG,
        )

    def __repr__(self) -> str:
        return (f"MatchSession(seed={self.seed_component.name!r}, "
                f"anchors={len(self._anchors)}, results={len(self._accepted)})")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def results(self) -> list[MatchResult]:
        """Matches accepted so far, in acceptance order."""
        return list(self._accepted)

    @property
    def finished(self) -> bool:
        return self._cursor >= len(self._anchors)

    @property
    def anchor_count(self) -> int:
        return len(self._anchors)

    def iter_batches(self, batch_size: int = config.DEFAULT_MATCH_BATCH_SIZE) -> Iterator[list[MatchResult]]:
        """
        Process candidate anchors in batches.

        Args:
            batch_size: Anchors per batch (must be positive)

        Yields:
            The matches accepted while processing each batch

        Raises:
            ValueError: If batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        while not self.finished:
            end = min(self._cursor + batch_size, len(self._anchors))
            batch: list[MatchResult] = []
            for anchor in self._anchors[self._cursor:end]:
                result = self._match_anchor(anchor)
                if result is not None:
                    batch.append(result)
            self._cursor = end
            yield batch

    def run(
        self,
        cancel_token: CancellationToken | None = None,
        batch_size: int = config.DEFAULT_MATCH_BATCH_SIZE,
    ) -> list[MatchResult]:
        """
        Run (or resume) the search.

        Args:
            cancel_token: Checked before every batch; when set, the run
                stops and returns what it has accepted so far
            batch_size: Anchors processed between cancellation checks

        Returns:
            All matches accepted by this session
        """
        if cancel_token is not None and cancel_token.cancelled:
            self.cancelled = True
        else:
            for _ in self.iter_batches(batch_size):
                if cancel_token is not None and cancel_token.cancelled:
                    self.cancelled = True
                    break

        if self.cancelled:
            log(f"Auto-Match: cancelled after {self._cursor}/{len(self._anchors)} anchors "
                f"with {len(self._accepted)} matches")
        elif self._accepted:
            mode = 'standard' if self.settings.is_default else 'fuzzy'
            log(f"Auto-Match: created {len(self._accepted)} new matching groups for "
                f"{self.seed_component.name!r} using {mode} parameters")
        else:
            log(f"Auto-Match: no new matches found for {self.seed_component.name!r}")
        return self.results

    def rotation_hypotheses(self, anchor: Entity) -> list[RotationHypothesis]:
        """
        Ordered rotation hypotheses for a candidate anchor.

        Hypotheses come out in grid scan order. When angle_tolerance is
        positive, a hypothesis within that many degrees of an earlier one
        is dropped.
        """
        if not self._seed:
            return []
        if self._reference is None:
            return [RotationHypothesis(0.0)]

        anchor_center = anchor.center_point()
        radius_cells = self._grid.cells_radius(
            self.ref_distance + self.tolerance * REFERENCE_SEARCH_PAD_FACTOR
        )
        band = self.tolerance * REFERENCE_BAND_FACTOR
        min_separation = math.radians(self.settings.angle_tolerance)

        hypotheses: list[RotationHypothesis] = []
        for candidate in self._grid.neighborhood(anchor_center, radius_cells):
            if candidate.id == anchor.id or candidate.id in self._used:
                continue
            if not self._matches(candidate, self._reference.signature):
                continue
            candidate_center = candidate.center_point()
            distance = distance_between_points(anchor_center, candidate_center)
            if abs(distance - self.ref_distance) >= band:
                continue
            delta = angle_of(anchor_center, candidate_center) - self.ref_angle
            if min_separation > 0 and any(
                _angular_distance(delta, h.delta_theta) < min_separation for h in hypotheses
            ):
                continue
            hypotheses.append(RotationHypothesis(delta, candidate.id))
        return hypotheses

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _member(self, entity: Entity, primary_center: Point2D) -> _SeedMember:
        center = entity.center_point()
        return _SeedMember(
            entity=entity,
            signature=signature_of(entity),
            offset=(center[0] - primary_center[0], center[1] - primary_center[1]),
        )

    def _select_primary_anchor(self) -> int:
        best_index = 0
        best_size = -1.0
        for i, entity in enumerate(self._seed):
            size = characteristic_size(entity)
            if size > best_size:
                best_size = size
                best_index = i
        return best_index

    def _select_reference(self) -> _SeedMember | None:
        """Seed member farthest from the primary anchor (first on ties)."""
        best: _SeedMember | None = None
        best_dist_sq = -1.0
        for member in self._others:
            dist_sq = member.offset[0] ** 2 + member.offset[1] ** 2
            if dist_sq > best_dist_sq:
                best_dist_sq = dist_sq
                best = member
        return best

    def _signature(self, entity: Entity) -> EntitySignature:
        sig = self._signatures.get(entity.id)
        if sig is None:
            sig = self._signatures[entity.id] = signature_of(entity)
        return sig

    def _matches(self, entity: Entity, target: EntitySignature) -> bool:
        return signatures_match(self._signature(entity), target, self.settings.geometry_tolerance)

    def _match_anchor(self, anchor: Entity) -> MatchResult | None:
        if anchor.id in self._used:
            return None
        if not self._matches(anchor, self._primary.signature):
            return None

        for hypothesis in self.rotation_hypotheses(anchor):
            cluster = self._build_cluster(anchor, hypothesis.delta_theta)
            if cluster is None:
                continue
            members, bounds = cluster
            centroid = bounds.center
            if self._too_close(centroid):
                continue
            return self._accept(members, bounds, centroid, hypothesis.delta_theta)
        return None

    def _build_cluster(self, anchor: Entity, delta_theta: float) -> tuple[list[Entity], Bounds] | None:
        anchor_center = anchor.center_point()
        members = [anchor]
        consumed = {anchor.id}
        bounds = anchor.bounds
        for member in self._others:
            offset = rotate_vector(member.offset, delta_theta)
            target = (anchor_center[0] + offset[0], anchor_center[1] + offset[1])
            found = self._find_member(member, target, consumed)
            if found is None:
                return None
            members.append(found)
            consumed.add(found.id)
            bounds = bounds.union(found.bounds)
        return members, bounds

    def _find_member(self, member: _SeedMember, target: Point2D, consumed: set[str]) -> Entity | None:
        tol = self.tolerance
        for candidate in self._grid.neighborhood(target, 1):
            if candidate.id in consumed or candidate.id in self._used:
                continue
            if not self._matches(candidate, member.signature):
                continue
            cx, cy = candidate.center_point()
            if abs(cx - target[0]) < tol and abs(cy - target[1]) < tol:
                return candidate
        return None

    def _too_close(self, centroid: Point2D) -> bool:
        min_distance = self.settings.min_match_distance
        if min_distance <= 0:
            return False
        seed_centroid = self.seed_component.centroid
        if seed_centroid is not None and distance_between_points(centroid, seed_centroid) < min_distance:
            return True
        for match in self._existing:
            if match.centroid is not None and distance_between_points(centroid, match.centroid) < min_distance:
                return True
        return any(
            distance_between_points(centroid, accepted.centroid) < min_distance
            for accepted in self._accepted
        )

    def _accept(self, members: list[Entity], bounds: Bounds, centroid: Point2D, delta_theta: float) -> MatchResult:
        number = len(self._existing) + len(self._accepted) + 1
        result = MatchResult(
            id=_generate_id(),
            name=f"{self.seed_component.name} Match {number}",
            entity_ids=tuple(e.id for e in members),
            centroid=centroid,
            bounds=bounds,
            rotation=normalize_radians(delta_theta),
            rotation_deg=normalize_degrees(math.degrees(delta_theta)),
        )
        self._accepted.append(result)
        self._used.update(result.entity_ids)
        return result


def find_matches(
    seed_entities: Sequence[Entity],
    corpus: Iterable[Entity],
    seed_component: Component,
    existing_matches: Sequence[Component] = (),
    settings: MatchSettings | None = None,
    region: Bounds | None = None,
) -> list[MatchResult]:
    """
    Find every rotated/translated copy of a seed pattern in a corpus.

    Args:
        seed_entities: Flattened seed entities
        corpus: All entities in the drawing
        seed_component: The seed group
        existing_matches: Matches already derived from this seed
        settings: Tuning parameters
        region: Optional absolute CAD search region

    Returns:
        New matches, pairwise disjoint and disjoint from the seed and the
        existing matches. An empty seed or corpus gives an empty list.
    """
    session = MatchSession(
        seed_entities, corpus, seed_component, existing_matches, settings, region
    )
    return session.run()
