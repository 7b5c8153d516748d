"""Component (group) model storage and editing."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Iterator
from typing import Any, Literal

from .. import config
from ..core.matching import CancellationToken, MatchSession
from ..core.signatures import SizeGroup, group_by_size
from ..lib.logUtils import log
from ..models.component import Component
from ..models.entity import Bounds, Entity
from ..models.settings import MatchSettings
from ..models.types import ComponentFlag

COMPONENT_FLAGS: frozenset[str] = frozenset({'is_visible', 'is_weld', 'is_mark'})


class ComponentCycleError(ValueError):
    """Raised when nesting a group would make it contain itself."""

    pass


class SnapshotLoadError(ValueError):
    """Raised when a group model snapshot cannot be loaded."""

    pass


class ComponentStore:
    """
    Arena of components over one drawing's entity corpus.

    Components reference each other by id only: a seed lists nested groups
    in ``child_group_ids`` and every match points back to its seed through
    ``parent_group_id``. All edits go through this class so that bounds and
    centroids stay current.

    Schema Version History:
        1.0 - Initial schema with entities and components
    """

    CURRENT_VERSION = config.SNAPSHOT_VERSION
    SUPPORTED_VERSIONS = config.SUPPORTED_SNAPSHOT_VERSIONS

    def __init__(self, entities: Iterable[Entity] = ()) -> None:
        """
        Initialize the store.

        Args:
            entities: The drawing's entity corpus
        """
        self._entities: dict[str, Entity] = {e.id: e for e in entities}
        self._components: dict[str, Component] = {}
        self._color_index = 0

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._components

    def __iter__(self) -> Iterator[Component]:
        return iter(list(self._components.values()))

    def __repr__(self) -> str:
        return f"ComponentStore(entities={len(self._entities)}, components={len(self._components)})"

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def entities(self) -> list[Entity]:
        """Entity corpus in drawing order."""
        return list(self._entities.values())

    @property
    def components(self) -> list[Component]:
        """All components in creation order."""
        return list(self._components.values())

    def get_entity(self, entity_id: str) -> Entity | None:
        """Find an entity by ID."""
        return self._entities.get(entity_id)

    def get_component(self, component_id: str) -> Component | None:
        """Find a component by ID."""
        return self._components.get(component_id)

    def top_level_components(self) -> list[Component]:
        """Components that are not matches of another component."""
        return [c for c in self._components.values() if c.parent_group_id is None]

    def matches_of(self, seed_id: str) -> list[Component]:
        """Matches derived from a seed, in creation order."""
        return [c for c in self._components.values() if c.parent_group_id == seed_id]

    def flatten_entity_ids(self, component_id: str) -> set[str]:
        """
        All entity ids owned by a component, directly or through nested
        groups. Each component is visited at most once, so a malformed
        snapshot with a cycle still terminates.
        """
        collected: set[str] = set()
        visited: set[str] = set()
        stack = [component_id]
        while stack:
            current_id = stack.pop()
            if current_id in visited:
                continue
            visited.add(current_id)
            comp = self._components.get(current_id)
            if comp is None:
                continue
            collected.update(comp.entity_ids)
            stack.extend(comp.child_group_ids)
        return collected

    def seed_entities(self, component_id: str) -> list[Entity]:
        """Flattened entities of a component, in drawing order."""
        ids = self.flatten_entity_ids(component_id)
        return [e for e in self._entities.values() if e.id in ids]

    def owner_map(self) -> dict[str, list[str]]:
        """
        Map of entity id to the ids of every component owning it, directly
        or through nested groups. Components appear in creation order.
        """
        owners: dict[str, list[str]] = {}
        for comp_id in self._components:
            for eid in self.flatten_entity_ids(comp_id):
                owners.setdefault(eid, []).append(comp_id)
        return owners

    def owners_of(self, entity_id: str) -> list[str]:
        """Ids of every component owning an entity directly or through nested groups."""
        return self.owner_map().get(entity_id, [])

    def size_groups(self) -> list[SizeGroup]:
        """Quick grouping buckets over the whole corpus."""
        return group_by_size(self._entities.values())

    # ------------------------------------------------------------------
    # Geometry maintenance
    # ------------------------------------------------------------------

    def recompute_geometry(self, component_id: str) -> bool:
        """
        Recompute tight bounds and centroid from the owned entities.

        Returns:
            True if the component was found
        """
        comp = self._components.get(component_id)
        if comp is None:
            return False
        bounds = Bounds.union_all(
            self._entities[eid].bounds
            for eid in self.flatten_entity_ids(component_id)
            if eid in self._entities
        )
        comp.bounds = bounds
        comp.centroid = bounds.center if bounds is not None else None
        return True

    def _ancestors_of(self, component_id: str) -> list[str]:
        """Ids of components that contain the given one, at any depth."""
        found: list[str] = []
        frontier = [component_id]
        seen = {component_id}
        while frontier:
            current = frontier.pop()
            for comp in self._components.values():
                if current in comp.child_group_ids and comp.id not in seen:
                    seen.add(comp.id)
                    found.append(comp.id)
                    frontier.append(comp.id)
        return found

    def _refresh(self, component_id: str) -> None:
        self.recompute_geometry(component_id)
        for ancestor_id in self._ancestors_of(component_id):
            self.recompute_geometry(ancestor_id)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _generate_id(self) -> str:
        """Generate a unique ID."""
        while True:
            new_id = str(uuid.uuid4())[:8]
            if new_id not in self._components:
                return new_id

    def _next_color(self) -> str:
        color = config.GROUP_COLORS[self._color_index % len(config.GROUP_COLORS)]
        self._color_index += 1
        return color

    def _check_entity_ids(self, entity_ids: Iterable[str]) -> set[str]:
        ids = set(entity_ids)
        unknown = ids - self._entities.keys()
        if unknown:
            raise ValueError(f"Unknown entity ids: {', '.join(sorted(unknown))}")
        return ids

    def add_component(
        self,
        name: str,
        entity_ids: Iterable[str] = (),
        child_group_ids: Iterable[str] = (),
        is_weld: bool = False,
        is_mark: bool = False,
        color: str | None = None,
    ) -> Component:
        """
        Add a new top-level (seed) component.

        Args:
            name: Display name
            entity_ids: Direct member entity ids
            child_group_ids: Existing components to nest
            is_weld: Weld flag
            is_mark: Mark flag
            color: Display color (next palette color when None)

        Returns:
            The created Component

        Raises:
            ValueError: If an entity or child group id is unknown
        """
        ids = self._check_entity_ids(entity_ids)
        children = list(dict.fromkeys(child_group_ids))
        missing = [cid for cid in children if cid not in self._components]
        if missing:
            raise ValueError(f"Unknown child group ids: {', '.join(missing)}")

        comp = Component(
            id=self._generate_id(),
            name=name,
            entity_ids=ids,
            child_group_ids=children,
            is_weld=is_weld,
            is_mark=is_mark,
            color=color if color is not None else self._next_color(),
            seed_size=len(ids),
        )
        self._components[comp.id] = comp
        self.recompute_geometry(comp.id)
        return comp

    def create_size_group(self, key: str, kind: Literal['weld', 'mark']) -> Component | None:
        """
        Turn a quick grouping bucket into a weld or mark component.

        Args:
            key: Bucket key from ``size_groups``
            kind: 'weld' or 'mark'

        Returns:
            The created Component, or None if no bucket has that key

        Raises:
            ValueError: If kind is not 'weld' or 'mark'
        """
        if kind not in ('weld', 'mark'):
            raise ValueError(f"kind must be 'weld' or 'mark', got {kind!r}")
        group = next((g for g in self.size_groups() if g.key == key), None)
        if group is None:
            return None
        comp = self.add_component(
            group.label,
            group.entity_ids,
            is_weld=kind == 'weld',
            is_mark=kind == 'mark',
        )
        log(f"Set {group.count} items as {kind.capitalize()}")
        return comp

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_child_group(self, parent_id: str, child_id: str) -> bool:
        """
        Nest one component inside another.

        Returns:
            True if both components exist

        Raises:
            ComponentCycleError: If the child is the parent or already
                contains the parent
        """
        parent = self._components.get(parent_id)
        child = self._components.get(child_id)
        if parent is None or child is None:
            return False
        if parent_id == child_id:
            raise ComponentCycleError(f"Component {parent_id!r} cannot contain itself")
        if parent_id in self._descendants_of(child_id):
            raise ComponentCycleError(
                f"Nesting {child_id!r} in {parent_id!r} would create a cycle"
            )
        if child_id not in parent.child_group_ids:
            parent.child_group_ids.append(child_id)
            self._refresh(parent_id)
        return True

    def _descendants_of(self, component_id: str) -> set[str]:
        found: set[str] = set()
        stack = list(self._components[component_id].child_group_ids)
        while stack:
            current = stack.pop()
            if current in found:
                continue
            found.add(current)
            comp = self._components.get(current)
            if comp is not None:
                stack.extend(comp.child_group_ids)
        return found

    def remove_child_group(self, parent_id: str, child_id: str) -> bool:
        """
        Un-nest a child group (the child itself is kept).

        Returns:
            True if the child was nested in the parent and removed
        """
        parent = self._components.get(parent_id)
        if parent is None or child_id not in parent.child_group_ids:
            return False
        parent.child_group_ids.remove(child_id)
        self._refresh(parent_id)
        return True

    def remove_entity(self, component_id: str, entity_id: str) -> bool:
        """
        Remove one direct member entity from a component.

        Returns:
            True if the entity was a direct member and was removed
        """
        comp = self._components.get(component_id)
        if comp is None or entity_id not in comp.entity_ids:
            return False
        comp.entity_ids.discard(entity_id)
        self._refresh(component_id)
        return True

    def move_entities_to_new_component(
        self,
        source_id: str,
        entity_ids: Iterable[str],
        name: str | None = None,
    ) -> Component | None:
        """
        Move direct members of a component into a new top-level component.

        Ids that are not direct members of the source are ignored.

        Args:
            source_id: Component to take the entities from
            entity_ids: Entities to move
            name: Name of the new component (defaults to
                "<source name> Subgroup"; blank becomes "New Subgroup")

        Returns:
            The new Component, or None if the source is unknown or none of
            the ids belong to it
        """
        source = self._components.get(source_id)
        if source is None:
            return None
        moving = [eid for eid in dict.fromkeys(entity_ids) if eid in source.entity_ids]
        if not moving:
            return None

        if name is None:
            name = f"{source.name} Subgroup"
        source.entity_ids.difference_update(moving)
        self._refresh(source_id)
        comp = self.add_component(name.strip() or "New Subgroup", moving)
        log(f"Subgroup created: {comp.name!r} with {len(moving)} entities", logging.DEBUG)
        return comp

    def _remove_ids(self, removed: set[str]) -> None:
        """Drop components and every reference to them, then refresh parents."""
        affected: list[str] = []
        for cid in removed:
            affected.extend(self._ancestors_of(cid))
            self._components.pop(cid, None)
        for comp in self._components.values():
            if any(cid in removed for cid in comp.child_group_ids):
                comp.child_group_ids = [cid for cid in comp.child_group_ids if cid not in removed]
        for cid in dict.fromkeys(affected):
            if cid in self._components:
                self.recompute_geometry(cid)

    def delete_component(self, component_id: str) -> bool:
        """
        Delete a component together with all of its matches.

        The deleted ids are stripped from every other component's
        ``child_group_ids`` and the former parents are recomputed.

        Returns:
            True if the component was found and deleted
        """
        if component_id not in self._components:
            return False
        removed = {component_id}
        removed.update(c.id for c in self.matches_of(component_id))
        self._remove_ids(removed)
        return True

    def delete_all_matches(self, seed_id: str) -> int:
        """
        Delete every match of a seed, keeping the seed.

        Returns:
            Number of matches deleted
        """
        removed = {c.id for c in self.matches_of(seed_id)}
        if not removed:
            return 0
        self._remove_ids(removed)
        log("All matching groups cleared successfully.")
        return len(removed)

    def set_flag(self, component_id: str, flag: ComponentFlag, value: bool) -> bool:
        """
        Set a display flag. Changes on a seed propagate to its matches.

        Returns:
            True if the component was found

        Raises:
            ValueError: If flag is not a component flag
        """
        if flag not in COMPONENT_FLAGS:
            raise ValueError(f"Unknown component flag: {flag!r}")
        comp = self._components.get(component_id)
        if comp is None:
            return False
        targets = [comp]
        if comp.is_seed:
            targets.extend(self.matches_of(component_id))
        for target in targets:
            setattr(target, flag, value)
        return True

    def set_color(self, component_id: str, color: str) -> bool:
        """
        Set the display color. Changes on a seed propagate to its matches.

        Returns:
            True if the component was found
        """
        comp = self._components.get(component_id)
        if comp is None:
            return False
        comp.color = color
        for match in self.matches_of(component_id):
            match.color = color
        return True

    # ------------------------------------------------------------------
    # Weld sequence
    # ------------------------------------------------------------------

    def welding_queue(self) -> list[Component]:
        """
        Visible weld components in welding order.

        Sequenced components come first by sequence number; unsequenced
        ones follow in creation order.
        """
        welders = [c for c in self._components.values() if c.is_weld and c.is_visible]
        return sorted(welders, key=lambda c: (c.sequence is None, c.sequence or 0))

    def assign_sequence(self, component_id: str) -> bool:
        """
        Toggle a weld component's place in the welding order.

        A component without a sequence gets the current maximum plus one;
        a component that already has one loses it. Other sequence numbers
        are left as they are (see ``reorder_sequences``).

        Returns:
            True if the component exists and is a weld component
        """
        comp = self._components.get(component_id)
        if comp is None or not comp.is_weld:
            return False
        if comp.sequence is not None:
            comp.sequence = None
        else:
            comp.sequence = max((c.sequence or 0 for c in self._components.values()), default=0) + 1
        return True

    def reset_sequences(self) -> int:
        """
        Clear every sequence number.

        Returns:
            Number of components that had a sequence
        """
        cleared = 0
        for comp in self._components.values():
            if comp.sequence is not None:
                comp.sequence = None
                cleared += 1
        return cleared

    def reorder_sequences(self) -> None:
        """Renumber sequenced weld components to 1..n, keeping their order."""
        sequenced = sorted(
            (c for c in self._components.values() if c.is_weld and c.sequence is not None),
            key=lambda c: c.sequence,
        )
        for position, comp in enumerate(sequenced, start=1):
            comp.sequence = position

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def auto_match(
        self,
        seed_id: str,
        settings: MatchSettings | None = None,
        region: Bounds | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[Component]:
        """
        Find copies of a seed and commit them as match components.

        The matching run sees the store as read-only; its results are
        added in one step afterwards. A cancelled run commits the matches
        it accepted before cancellation.

        Args:
            seed_id: Component to use as the pattern
            settings: Tuning parameters
            region: Optional absolute CAD search region
            cancel_token: Token checked between anchor batches

        Returns:
            The new match components (empty if the seed is unknown or
            nothing was found)

        Raises:
            ValueError: If the component is itself a match
        """
        seed = self._components.get(seed_id)
        if seed is None:
            log(f"Auto-Match: unknown seed group {seed_id!r}", logging.WARNING)
            return []
        if seed.is_match:
            raise ValueError(f"Cannot use match {seed.name!r} as a seed; select its parent group")

        seed_entities = self.seed_entities(seed_id)
        session = MatchSession(
            seed_entities,
            self._entities.values(),
            seed,
            self.matches_of(seed_id),
            settings,
            region,
        )
        results = session.run(cancel_token)

        new_matches = [
            Component(
                id=result.id if result.id not in self._components else self._generate_id(),
                name=result.name,
                entity_ids=set(result.entity_ids),
                is_visible=seed.is_visible,
                is_weld=seed.is_weld,
                is_mark=seed.is_mark,
                color=seed.color,
                seed_size=len(seed_entities),
                centroid=result.centroid,
                bounds=result.bounds,
                parent_group_id=seed.id,
                rotation=result.rotation,
                rotation_deg=result.rotation_deg,
            )
            for result in results
        ]
        for comp in new_matches:
            self._components[comp.id] = comp
        return new_matches

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the corpus and the group model for JSON serialization."""
        return {
            'version': self.CURRENT_VERSION,
            'entities': [e.to_dict() for e in self._entities.values()],
            'components': [c.to_dict() for c in self._components.values()],
        }

    @classmethod
    def from_dict(cls, data: Any) -> ComponentStore:
        """
        Restore a store from a snapshot.

        Invalid individual entities and components are skipped with a
        warning. Child group references to components that did not load
        are dropped, as are nesting edges that would close a cycle.

        Raises:
            SnapshotLoadError: If the snapshot structure or version is invalid
        """
        # Validate top-level structure
        if not isinstance(data, dict):
            raise SnapshotLoadError("Invalid snapshot format: expected object at root")
        if 'components' not in data:
            raise SnapshotLoadError("Invalid snapshot format: missing 'components' key")

        version = data.get('version', '1.0')  # Default to 1.0 for legacy snapshots
        if version not in cls.SUPPORTED_VERSIONS:
            raise SnapshotLoadError(
                f"Unsupported snapshot schema version: {version}. "
                f"Supported versions: {', '.join(sorted(cls.SUPPORTED_VERSIONS))}"
            )

        entities_list = data.get('entities', [])
        components_list = data['components']
        if not isinstance(entities_list, list) or not isinstance(components_list, list):
            raise SnapshotLoadError(
                "Invalid snapshot format: 'entities' and 'components' must be lists"
            )

        entities: list[Entity] = []
        for i, entity_data in enumerate(entities_list):
            try:
                entities.append(Entity.from_dict(entity_data))
            except (KeyError, TypeError, ValueError, IndexError) as e:
                log(f"Warning: Skipping invalid entity at index {i}: {e}", logging.WARNING)

        store = cls(entities)
        for i, comp_data in enumerate(components_list):
            try:
                comp = Component.from_dict(comp_data)
            except (KeyError, TypeError, ValueError, IndexError) as e:
                log(f"Warning: Skipping invalid component at index {i}: {e}", logging.WARNING)
                continue
            store._components[comp.id] = comp

        # Re-add nesting edges one at a time so a cyclic snapshot cannot
        # bypass the check applied by add_child_group
        pending = {comp.id: comp.child_group_ids for comp in store._components.values()}
        for comp in store._components.values():
            comp.child_group_ids = []
        dropped: list[str] = []
        for parent_id, child_ids in pending.items():
            parent = store._components[parent_id]
            for child_id in dict.fromkeys(child_ids):
                if child_id not in store._components:
                    continue
                if child_id == parent_id or parent_id in store._descendants_of(child_id):
                    log(f"Warning: Dropping cyclic child group {child_id!r} of {parent_id!r}",
                        logging.WARNING)
                    dropped.append(parent_id)
                    continue
                parent.child_group_ids.append(child_id)
        for parent_id in dict.fromkeys(dropped):
            store._refresh(parent_id)
        store._color_index = len(store._components)
        return store
