"""
Tests for the pattern matching engine - runs without a DXF file.

Run with: pytest tests/ -v
"""
from __future__ import annotations

import math

import pytest

from core.matching import CancellationToken, MatchSession, RotationHypothesis, find_matches
from models.entity import Bounds
from models.settings import MatchSettings

from helpers import (
    make_arc,
    make_circle,
    make_line,
    make_seed_component,
    place_pattern,
    two_circle_seed,
)


PLACEMENTS = [
    (30.0, (200.0, 0.0)),
    (90.0, (0.0, 300.0)),
    (200.0, (-250.0, -250.0)),
    (0.0, (400.0, 400.0)),
]


def build_drawing(seed, placements=PLACEMENTS):
    corpus = list(seed)
    for i, (rotation, translation) in enumerate(placements):
        corpus.extend(place_pattern(seed, rotation, translation, f"copy{i}"))
    return corpus


class TestExactRecall:
    """Every placed copy is found exactly once with its rotation."""

    def test_finds_all_rotated_copies(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)
        settings = MatchSettings(min_match_distance=10.0)

        results = find_matches(seed, corpus, make_seed_component(seed), [], settings)

        assert len(results) == len(PLACEMENTS)
        by_anchor = {r.entity_ids[0]: r for r in results}
        for i, (rotation, _) in enumerate(PLACEMENTS):
            result = by_anchor[f"copy{i}-big"]
            assert set(result.entity_ids) == {f"copy{i}-big", f"copy{i}-small"}
            assert result.rotation_deg == pytest.approx(rotation % 360, abs=1e-6)
            assert result.rotation == pytest.approx(math.radians(rotation % 360), abs=1e-9)

    def test_rotations_are_normalized(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)

        for result in find_matches(seed, corpus, make_seed_component(seed)):
            assert 0.0 <= result.rotation < 2 * math.pi
            assert 0.0 <= result.rotation_deg < 360.0

    def test_names_are_sequential_after_existing(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)

        results = find_matches(seed, corpus, make_seed_component(seed, name='Hole'))

        assert [r.name for r in results] == [f"Hole Match {n}" for n in range(1, 5)]

    def test_ids_are_unique(self):
        seed = two_circle_seed()
        results = find_matches(seed, build_drawing(seed), make_seed_component(seed))
        assert len({r.id for r in results}) == len(results)

    def test_bounds_come_from_found_members(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed, [(0.0, (400.0, 400.0))])

        (result,) = find_matches(seed, corpus, make_seed_component(seed))

        assert result.bounds == Bounds(395.0, 395.0, 423.0, 405.0)
        assert result.centroid == pytest.approx((409.0, 400.0))

    def test_anchor_listed_first(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed, [(45.0, (100.0, 100.0))])

        (result,) = find_matches(seed, corpus, make_seed_component(seed))

        assert result.entity_ids == ("copy0-big", "copy0-small")

    def test_mixed_kinds_with_arc_and_line(self):
        seed = [
            make_circle('hole', (0.0, 0.0), 5.0),
            make_arc('fillet', (15.0, 5.0), 2.0, 0.0, math.pi / 2),
            make_line('edge', (-10.0, -10.0), (0.0, -10.0)),
        ]
        corpus = build_drawing(seed, [(45.0, (300.0, 300.0)), (160.0, (-300.0, 200.0))])

        results = find_matches(seed, corpus, make_seed_component(seed))

        assert len(results) == 2
        rotations = sorted(r.rotation_deg for r in results)
        assert rotations == pytest.approx([45.0, 160.0], abs=1e-6)

    def test_distractors_are_ignored(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed, [(0.0, (400.0, 400.0))])
        corpus += [
            make_circle('lonely-big', (900.0, -300.0), 5.0),
            make_circle('lonely-small', (-500.0, 500.0), 3.0),
            # right sizes, wrong spacing
            make_circle('far-big', (-900.0, -900.0), 5.0),
            make_circle('far-small', (-860.0, -900.0), 3.0),
        ]

        results = find_matches(seed, corpus, make_seed_component(seed))

        assert [r.entity_ids[0] for r in results] == ["copy0-big"]


class TestDisjointness:
    """No entity is claimed twice or taken from the seed."""

    def test_results_are_pairwise_disjoint(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)

        results = find_matches(seed, corpus, make_seed_component(seed))

        claimed = [eid for r in results for eid in r.entity_ids]
        assert len(claimed) == len(set(claimed))
        assert not set(claimed) & {e.id for e in seed}

    def test_shared_entities_claimed_once(self):
        seed = [make_circle('a', (0.0, 0.0), 5.0), make_circle('b', (20.0, 0.0), 5.0)]
        row = [make_circle(f"row{i}", (200.0 + 20.0 * i, 0.0), 5.0) for i in range(3)]

        results = find_matches(seed, seed + row, make_seed_component(seed))

        assert len(results) == 1
        assert set(results[0].entity_ids) == {"row0", "row1"}

    def test_existing_matches_are_excluded(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)
        component = make_seed_component(seed)
        first = find_matches(seed, corpus, component)
        existing = [
            make_seed_component([e for e in corpus if e.id in r.entity_ids],
                                name=r.name, component_id=r.id)
            for r in first[:2]
        ]

        second = find_matches(seed, corpus, component, existing)

        assert len(second) == 2
        assert not {eid for r in second for eid in r.entity_ids} & {
            eid for c in existing for eid in c.entity_ids
        }
        assert [r.name for r in second] == ["Seed Match 3", "Seed Match 4"]


class TestSpacingSuppression:
    """min_match_distance collapses near-duplicate detections."""

    def build(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed, [(0.0, (200.0, 0.0)), (0.0, (203.0, 0.0))])
        return seed, corpus

    def test_close_copies_collapse_to_one(self):
        seed, corpus = self.build()
        settings = MatchSettings(min_match_distance=10.0)

        results = find_matches(seed, corpus, make_seed_component(seed), [], settings)

        assert len(results) == 1
        assert results[0].entity_ids[0] == "copy0-big"

    def test_disabled_spacing_keeps_both(self):
        seed, corpus = self.build()

        results = find_matches(seed, corpus, make_seed_component(seed))

        assert len(results) == 2

    def test_spacing_against_seed_centroid(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed, [(0.0, (4.0, 30.0))])
        settings = MatchSettings(min_match_distance=50.0)

        results = find_matches(seed, corpus, make_seed_component(seed), [], settings)

        assert results == []


class TestToleranceBoundary:
    """Geometry tolerance is an exclusive bound on the radius difference."""

    def test_single_circle_seed(self):
        eps = 1e-3
        tol = 0.5
        seed = [make_circle('seed', (0.0, 0.0), 5.0)]
        corpus = seed + [
            make_circle('inside-up', (100.0, 0.0), 5.0 + tol - eps),
            make_circle('outside-up', (200.0, 0.0), 5.0 + tol + eps),
            make_circle('inside-down', (300.0, 0.0), 5.0 - tol + eps),
            make_circle('outside-down', (400.0, 0.0), 5.0 - tol - eps),
        ]
        settings = MatchSettings(geometry_tolerance=tol)

        results = find_matches(seed, corpus, make_seed_component(seed), [], settings)

        assert sorted(r.entity_ids[0] for r in results) == ["inside-down", "inside-up"]

    def test_single_entity_seed_has_zero_rotation(self):
        seed = [make_circle('seed', (0.0, 0.0), 5.0)]
        corpus = seed + [make_circle('other', (50.0, 50.0), 5.0)]

        (result,) = find_matches(seed, corpus, make_seed_component(seed))

        assert result.rotation == 0.0
        assert result.rotation_deg == 0.0

    def test_kind_mismatch_never_matches(self):
        seed = [make_circle('seed', (0.0, 0.0), 5.0)]
        corpus = seed + [make_arc('arc', (50.0, 50.0), 5.0, 0.0, math.pi)]

        assert find_matches(seed, corpus, make_seed_component(seed)) == []


class TestEmptyInputs:
    def test_empty_seed(self):
        corpus = [make_circle('c', (0.0, 0.0), 5.0)]
        component = make_seed_component([])
        assert find_matches([], corpus, component) == []

    def test_empty_corpus(self):
        seed = two_circle_seed()
        assert find_matches(seed, [], make_seed_component(seed)) == []

    def test_corpus_of_only_seed(self):
        seed = two_circle_seed()
        assert find_matches(seed, seed, make_seed_component(seed)) == []


class TestRegion:
    def test_region_restricts_candidates(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)
        region = Bounds(300.0, 300.0, 500.0, 500.0)

        results = find_matches(seed, corpus, make_seed_component(seed), [], None, region)

        assert [r.entity_ids[0] for r in results] == ["copy3-big"]


class TestRotationHypotheses:
    def build_session(self, angle_tolerance):
        seed = two_circle_seed()
        corpus = seed + [
            make_circle('anchor', (500.0, 500.0), 5.0),
            make_circle('ref-a', (520.0, 500.0), 3.0),
            make_circle('ref-b', (520.0, 500.2), 3.0),
        ]
        settings = MatchSettings(angle_tolerance=angle_tolerance)
        session = MatchSession(seed, corpus, make_seed_component(seed), [], settings)
        return session, corpus[2]

    def test_close_hypotheses_are_merged(self):
        session, anchor = self.build_session(angle_tolerance=1.0)

        hypotheses = session.rotation_hypotheses(anchor)

        assert hypotheses == [RotationHypothesis(0.0, 'ref-a')]

    def test_zero_angle_tolerance_keeps_all(self):
        session, anchor = self.build_session(angle_tolerance=0.0)

        hypotheses = session.rotation_hypotheses(anchor)

        assert [h.reference_id for h in hypotheses] == ['ref-a', 'ref-b']

    def test_single_entity_seed_uses_fixed_hypothesis(self):
        seed = [make_circle('seed', (0.0, 0.0), 5.0)]
        anchor = make_circle('a', (100.0, 0.0), 5.0)
        session = MatchSession(seed, seed + [anchor], make_seed_component(seed))

        assert session.rotation_hypotheses(anchor) == [RotationHypothesis(0.0)]

    def test_concentric_seed_matches(self):
        seed = [make_circle('outer', (0.0, 0.0), 8.0), make_circle('inner', (0.0, 0.0), 3.0)]
        corpus = build_drawing(seed, [(0.0, (150.0, 150.0))])

        (result,) = find_matches(seed, corpus, make_seed_component(seed))

        assert set(result.entity_ids) == {"copy0-outer", "copy0-inner"}
        assert result.rotation == 0.0


class TestMatchSession:
    def test_tolerance_and_cell_size(self):
        seed = two_circle_seed()
        session = MatchSession(seed, seed, make_seed_component(seed))

        # Seed bounds are 28 x 8
        assert session.tolerance == pytest.approx(0.56)
        assert session.cell_size == 100.0
        assert session.ref_distance == pytest.approx(20.0)

    def test_iter_batches_covers_every_anchor(self):
        seed = two_circle_seed()
        session = MatchSession(seed, build_drawing(seed), make_seed_component(seed))

        batches = list(session.iter_batches(batch_size=1))

        assert len(batches) == session.anchor_count
        assert sum(len(b) for b in batches) == len(PLACEMENTS)
        assert session.finished

    def test_invalid_batch_size(self):
        seed = two_circle_seed()
        session = MatchSession(seed, seed, make_seed_component(seed))
        with pytest.raises(ValueError):
            next(session.iter_batches(batch_size=0))

    def test_cancelled_before_start(self):
        seed = two_circle_seed()
        session = MatchSession(seed, build_drawing(seed), make_seed_component(seed))
        token = CancellationToken()
        token.cancel()

        assert session.run(token) == []
        assert session.cancelled
        assert not session.finished

    def test_cancel_between_batches(self):
        seed = two_circle_seed()
        session = MatchSession(seed, build_drawing(seed), make_seed_component(seed))
        token = CancellationToken()

        batches = session.iter_batches(batch_size=1)
        first = next(batches)
        token.cancel()
        partial = session.run(token)

        assert partial == first
        assert session.cancelled

    def test_resume_after_partial_run(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)
        session = MatchSession(seed, corpus, make_seed_component(seed))

        next(session.iter_batches(batch_size=2))
        results = session.run()

        full = find_matches(seed, corpus, make_seed_component(seed))
        assert [r.entity_ids for r in results] == [r.entity_ids for r in full]

    def test_inputs_are_not_mutated(self):
        seed = two_circle_seed()
        corpus = build_drawing(seed)
        component = make_seed_component(seed)
        before = component.to_dict()

        find_matches(seed, corpus, component)

        assert component.to_dict() == before
        assert len(corpus) == 2 * (len(PLACEMENTS) + 1)
