"""
Command Generator: catalog
Domain entities consumed by the wildcard replacer, plus the folder loader
for the JSON catalogs shipped next to the package.

Catalog folder layout (every file optional):
  names.json      {"male": [...], "female": [...]}
  locations.json  [{"room": "kitchen", "locations": [{"name": "fridge", "beacon": true, "placement": true}]}]
  objects.json    [{"category": "drinks", "location": "kitchen table",
                    "objects": [{"name": "coke", "type": "known", "tier": "easy"}]}]
  gestures.json   [{"name": "waving", "tier": "easy"}]
  questions.json  [{"question": "...", "answer": "...", "tier": "moderate"}]
"""

import functools
import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum, IntEnum

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_ROOT = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "catalogs")
)


class CatalogError(ValueError):
    """Raised when a catalog file exists but cannot be understood."""


class DifficultyDegree(IntEnum):
    NONE = 0
    EASY = 1
    MODERATE = 2
    HIGH = 3

    @classmethod
    def parse(cls, text) -> "DifficultyDegree":
        if isinstance(text, cls):
            return text
        try:
            return cls[str(text).strip().upper()]
        except KeyError:
            return cls.EASY


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"


class ObjectType(Enum):
    KNOWN = "known"
    ALIKE = "alike"
    UNKNOWN = "unknown"


# ------------------------------- Entities -----------------------------------

@dataclass(frozen=True)
class Category:
    name: str
    default_location: str | None = None


@dataclass(frozen=True)
class Gesture:
    name: str
    tier: DifficultyDegree = DifficultyDegree.EASY


@dataclass(frozen=True)
class Room:
    name: str

    is_room = True
    is_beacon = False
    is_placement = False


@dataclass(frozen=True)
class SpecificLocation:
    name: str
    room: Room
    is_beacon: bool = False
    is_placement: bool = False

    is_room = False


@dataclass(frozen=True)
class PersonName:
    name: str
    gender: Gender


@dataclass(frozen=True)
class GPSRObject:
    name: str
    category: Category
    type: ObjectType = ObjectType.KNOWN
    tier: DifficultyDegree = DifficultyDegree.EASY


@dataclass(frozen=True)
class PredefinedQuestion:
    question: str
    answer: str = ""
    tier: DifficultyDegree = DifficultyDegree.EASY

    @property
    def name(self) -> str:
        return self.question


@dataclass
class Catalog:
    """
    Everything a generation session may draw from. Rooms live in `locations`
    next to the specific locations they contain.
    """

    categories: list = field(default_factory=list)
    gestures: list = field(default_factory=list)
    locations: list = field(default_factory=list)
    names: list = field(default_factory=list)
    objects: list = field(default_factory=list)
    questions: list = field(default_factory=list)


# ------------------------------- Loading ------------------------------------

def _read_json(folder: str, filename: str):
    path = os.path.join(folder, filename)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Catalog file missing: %s", path)
        return None
    except json.JSONDecodeError as e:
        raise CatalogError(f"Malformed catalog file {path}: {e}") from e


def _names_from(data) -> list[PersonName]:
    if not data:
        return []
    names = []
    for gender in Gender:
        for n in data.get(gender.value, []):
            names.append(PersonName(n, gender))
    return names


def _locations_from(data) -> list:
    locations = []
    for entry in data or []:
        room = Room(entry["room"])
        locations.append(room)
        for loc in entry.get("locations", []):
            locations.append(SpecificLocation(
                loc["name"],
                room,
                is_beacon=bool(loc.get("beacon", False)),
                is_placement=bool(loc.get("placement", False)),
            ))
    return locations


def _objects_from(data) -> tuple[list[Category], list[GPSRObject]]:
    categories, objects = [], []
    for entry in data or []:
        category = Category(entry["category"], entry.get("location"))
        categories.append(category)
        for obj in entry.get("objects", []):
            try:
                otype = ObjectType(str(obj.get("type", "known")).lower())
            except ValueError as e:
                raise CatalogError(f"Unknown object type for {obj['name']!r}: {obj.get('type')!r}") from e
            objects.append(GPSRObject(
                obj["name"],
                category,
                type=otype,
                tier=DifficultyDegree.parse(obj.get("tier", "easy")),
            ))
    return categories, objects


def load_catalog(folder: str | None = None) -> Catalog:
    """
    Read every catalog file found in 'folder' (defaults to DEFAULT_CATALOG_ROOT).
    Missing files give empty collections; structurally broken entries raise CatalogError.
    """
    folder = folder or DEFAULT_CATALOG_ROOT
    try:
        categories, objects = _objects_from(_read_json(folder, "objects.json"))
        gestures = [
            Gesture(g["name"], DifficultyDegree.parse(g.get("tier", "easy")))
            for g in _read_json(folder, "gestures.json") or []
        ]
        questions = [
            PredefinedQuestion(q["question"], q.get("answer", ""), DifficultyDegree.parse(q.get("tier", "easy")))
            for q in _read_json(folder, "questions.json") or []
        ]
        return Catalog(
            categories=categories,
            gestures=gestures,
            locations=_locations_from(_read_json(folder, "locations.json")),
            names=_names_from(_read_json(folder, "names.json")),
            objects=objects,
            questions=questions,
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise CatalogError(f"Malformed catalog in {folder}: {e!r}") from e


# --------------------------- Folder discovery -------------------------------

def _default_package_root():
    # package root is one directory above the module file
    return os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


@functools.lru_cache(maxsize=4)
def build_catalog_options(base_dir: str | None = None):
    """
    Discover folders beginning with 'catalog' inside 'base_dir' (defaults to package root).
    Returns: (labels_list, label_to_folder_map, tooltip_str)

    Always ensures 'catalogs' is present so the node has at least one choice.
    """
    if base_dir is None:
        base_dir = _default_package_root()

    folder_names = []
    try:
        for name in sorted(os.listdir(base_dir)):
            path = os.path.join(base_dir, name)
            if os.path.isdir(path) and name.startswith("catalog"):
                folder_names.append(name)
    except OSError:
        folder_names = []

    if "catalogs" in folder_names:
        folder_names.remove("catalogs")
    folder_names.insert(0, "catalogs")

    label_to_folder = {fname: os.path.join(base_dir, fname) for fname in folder_names}

    tooltip = (
        "Select which catalog folder to draw names, locations, objects, gestures "
        "and questions from. Create alternate folders named 'catalogs_*' "
        "(eg. 'catalogs_arena') inside the package root."
    )

    return list(folder_names), label_to_folder, tooltip


def clear_catalog_cache():
    """
    Forget discovered catalog folders (useful after adding one at runtime).
    """
    build_catalog_options.cache_clear()
