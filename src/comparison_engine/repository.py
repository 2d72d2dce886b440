"""Technology and criterion storage.

The engine only depends on the TechnologyRepository read contract. The
in-memory implementation here backs the CLI and tests, loads catalogs from
JSON or YAML files and notifies listeners of every write so caches can be
invalidated.
"""

import json
import threading
from dataclasses import dataclass
from datetime import datetime
from importlib import resources
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, Union, runtime_checkable

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .app_logging import get_logger
from .errors import CatalogLoadError, InvalidInputError
from .schema import Criterion, Technology

logger = get_logger(__name__)

DEFAULT_CATALOG_RESOURCE = "default-catalog.json"


@runtime_checkable
class TechnologyRepository(Protocol):
    """Read contract the comparison engine relies on."""

    def find_technologies_by_ids(self, ids: Iterable[int]) -> list[Technology]:
        ...

    def find_technologies_by_names(self, names: Iterable[str]) -> list[Technology]:
        ...

    def find_technology_by_id(self, technology_id: int) -> Optional[Technology]:
        ...

    def get_active_criteria(self) -> list[Criterion]:
        ...


# =============================================================================
# Catalog file model
# =============================================================================


def _duplicates(values: Iterable) -> list:
    seen = set()
    dupes = []
    for v in values:
        if v in seen and v not in dupes:
            dupes.append(v)
        seen.add(v)
    return dupes


class TechnologyCatalog(BaseModel):
    """On-disk catalog of technologies and criteria."""
    version: str = "1.0.0"
    generated_at: Optional[datetime] = None
    technologies: list[Technology] = Field(default_factory=list)
    criteria: list[Criterion] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique(self) -> "TechnologyCatalog":
        checks = [
            ("technology id", [t.id for t in self.technologies]),
            ("technology name", [t.name.lower() for t in self.technologies]),
            ("criterion id", [c.id for c in self.criteria]),
            ("criterion name", [c.name.lower() for c in self.criteria]),
        ]
        for label, values in checks:
            dupes = _duplicates(values)
            if dupes:
                raise ValueError(f"Duplicate {label}(s) in catalog: {', '.join(str(d) for d in dupes)}")
        return self


def load_catalog(path: Union[str, Path]) -> TechnologyCatalog:
    """Load and validate a catalog file (.json, .yaml or .yml).

    Raises:
        CatalogLoadError: File missing, unparseable or structurally invalid
    """
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"Catalog file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
        raise CatalogLoadError(f"Catalog file {path} could not be parsed: {exc}") from exc

    return _validate_catalog(data, str(path))


def _validate_catalog(data, source: str) -> TechnologyCatalog:
    if not isinstance(data, dict):
        raise CatalogLoadError(f"Catalog {source} must be an object with 'technologies' and 'criteria'")
    try:
        return TechnologyCatalog.model_validate(data)
    except ValidationError as exc:
        raise CatalogLoadError(f"Catalog {source} is invalid: {exc}") from exc


# =============================================================================
# In-memory repository
# =============================================================================


@dataclass(frozen=True)
class RepositoryEvent:
    """A write to the repository."""
    entity: str  # "technology" or "criterion"
    action: str  # "saved" or "deleted"
    entity_id: int


RepositoryListener = Callable[[RepositoryEvent], None]


class InMemoryTechnologyRepository:
    """Thread-safe dictionary-backed repository.

    Technology and criterion names are unique case-insensitively, and name
    lookups ignore case.
    """

    def __init__(
        self,
        technologies: Optional[Iterable[Technology]] = None,
        criteria: Optional[Iterable[Criterion]] = None,
    ):
        self._lock = threading.RLock()
        self._technologies: dict[int, Technology] = {}
        self._criteria: dict[int, Criterion] = {}
        self._listeners: list[RepositoryListener] = []

        for tech in technologies or []:
            self._put_technology(tech)
        for criterion in criteria or []:
            self._put_criterion(criterion)

    @classmethod
    def from_catalog(cls, catalog: TechnologyCatalog) -> "InMemoryTechnologyRepository":
        return cls(catalog.technologies, catalog.criteria)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "InMemoryTechnologyRepository":
        catalog = load_catalog(path)
        logger.info(
            "Loaded catalog %s: %d technologies, %d criteria",
            path, len(catalog.technologies), len(catalog.criteria),
        )
        return cls.from_catalog(catalog)

    def to_catalog(self) -> TechnologyCatalog:
        with self._lock:
            return TechnologyCatalog(
                technologies=self.list_technologies(),
                criteria=sorted(self._criteria.values(), key=lambda c: c.id),
            )

    # -- reads ---------------------------------------------------------------

    def find_technology_by_id(self, technology_id: int) -> Optional[Technology]:
        with self._lock:
            return self._technologies.get(technology_id)

    def find_technology_by_name(self, name: str) -> Optional[Technology]:
        lookup = name.strip().lower()
        with self._lock:
            return next((t for t in self._technologies.values() if t.name.lower() == lookup), None)

    def find_technologies_by_ids(self, ids: Iterable[int]) -> list[Technology]:
        """Technologies for the ids that exist, in storage order."""
        wanted = set(ids)
        with self._lock:
            return [t for t in self._technologies.values() if t.id in wanted]

    def find_technologies_by_names(self, names: Iterable[str]) -> list[Technology]:
        """Technologies for the names that exist (case-insensitive), in storage order."""
        wanted = {n.strip().lower() for n in names}
        with self._lock:
            return [t for t in self._technologies.values() if t.name.lower() in wanted]

    def list_technologies(self, category: Optional[str] = None) -> list[Technology]:
        with self._lock:
            techs = sorted(self._technologies.values(), key=lambda t: t.id)
        if category:
            techs = [t for t in techs if t.category.lower() == category.strip().lower()]
        return techs

    def get_active_criteria(self) -> list[Criterion]:
        """Active criteria ordered by id."""
        with self._lock:
            return sorted((c for c in self._criteria.values() if c.active), key=lambda c: c.id)

    # -- writes --------------------------------------------------------------

    def save_technology(self, technology: Technology) -> Technology:
        """Insert or replace a technology (matched by id)."""
        with self._lock:
            self._put_technology(technology)
        logger.debug("Saved technology %s (id=%d)", technology.name, technology.id)
        self._notify(RepositoryEvent("technology", "saved", technology.id))
        return technology

    def delete_technology(self, technology_id: int) -> bool:
        with self._lock:
            removed = self._technologies.pop(technology_id, None)
        if removed is None:
            return False
        logger.debug("Deleted technology %s (id=%d)", removed.name, technology_id)
        self._notify(RepositoryEvent("technology", "deleted", technology_id))
        return True

    def save_criterion(self, criterion: Criterion) -> Criterion:
        """Insert or replace a criterion (matched by id)."""
        with self._lock:
            self._put_criterion(criterion)
        logger.debug("Saved criterion %s (id=%d)", criterion.name, criterion.id)
        self._notify(RepositoryEvent("criterion", "saved", criterion.id))
        return criterion

    def delete_criterion(self, criterion_id: int) -> bool:
        with self._lock:
            removed = self._criteria.pop(criterion_id, None)
        if removed is None:
            return False
        logger.debug("Deleted criterion %s (id=%d)", removed.name, criterion_id)
        self._notify(RepositoryEvent("criterion", "deleted", criterion_id))
        return True

    # -- listeners -----------------------------------------------------------

    def subscribe(self, listener: RepositoryListener) -> None:
        """Register a callback invoked after every write."""
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RepositoryListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, event: RepositoryEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    # -- internals -----------------------------------------------------------

    def _put_technology(self, technology: Technology) -> None:
        lookup = technology.name.lower()
        for existing in self._technologies.values():
            if existing.id != technology.id and existing.name.lower() == lookup:
                raise InvalidInputError(f"Technology with name '{technology.name}' already exists")
        self._technologies[technology.id] = technology

    def _put_criterion(self, criterion: Criterion) -> None:
        lookup = criterion.name.lower()
        for existing in self._criteria.values():
            if existing.id != criterion.id and existing.name.lower() == lookup:
                raise InvalidInputError(f"Criterion with name '{criterion.name}' already exists")
        self._criteria[criterion.id] = criterion

    def __len__(self) -> int:
        with self._lock:
            return len(self._technologies)


def load_default_repository() -> InMemoryTechnologyRepository:
    """Repository seeded with the bundled default catalog."""
    resource = resources.files("comparison_engine") / "data" / DEFAULT_CATALOG_RESOURCE
    raw = resource.read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CatalogLoadError(f"Bundled catalog could not be parsed: {exc}") from exc
    return InMemoryTechnologyRepository.from_catalog(_validate_catalog(data, DEFAULT_CATALOG_RESOURCE))
