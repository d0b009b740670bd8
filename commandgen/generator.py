"""
Command Generator: generator
The brain that turns a task prototype into a concrete instruction.

A generation session (one WildcardReplacer) owns:
  - one availability pool per entity kind, shuffled once and then consumed
    from the ends, so no entity is handed out twice in a session
  - a replacement cache keyed by wildcard keycode, so {name 1} means the
    same person everywhere in the prototype (ids >= 1000 always draw fresh)
  - the ordered wildcard history used to pick pronouns

Sessions never share state: build a new replacer (or call generate_task)
per task, each with its own SeededRandom.
"""

import logging
import random
import re

from .catalog import DifficultyDegree, Gender, ObjectType
from .prototypes import pick_prototype
from .task import HiddenTaskElement, NamedTaskElement, Obfuscator, Task, Token
from .wildcard import GENERIC_KINDS, TYPE_KEYWORDS, extract_wildcard, find_wildcards

logger = logging.getLogger(__name__)

MAX_NESTED_DEPTH = 8

# Metadata lines break on real newlines and on their escaped spellings
METADATA_SPLIT_PATTERN = re.compile(r"\\\\r|\\\\n|\\\\|\r\n|\r|\n")

PRONOUNS = {
    "name": "him",
    "male": "him",
    "female": "her",
    "object": "it",
    "kobject": "it",
    "aobject": "it",
    "beacon": "it",
    "room": "it",
    "placement": "it",
    "location": "it",
}


class GenerationError(RuntimeError):
    """A task could not be generated from the given prototype and catalog."""


class PoolExhaustedError(GenerationError):
    def __init__(self, kind: str, detail: str = ""):
        self.kind = kind
        message = f"No {kind} left to draw"
        if detail:
            message += f" ({detail})"
        message += "; the prototype asks for more unique entries than the catalog holds"
        super().__init__(message)


# -------------------------------- RNG ---------------------------------------

class SeededRandom:
    def __init__(self, base_seed: int):
        self.seed = base_seed

    def next_rng(self) -> random.Random:
        """
        Advances the seed and returns a new Random instance.
        """
        self.seed += 1
        return random.Random(self.seed)

    def random(self) -> float:
        return self.next_rng().random()

    def randint(self, a: int, b: int) -> int:
        return self.next_rng().randint(a, b)

    def choice(self, seq):
        return self.next_rng().choice(seq)

    def shuffle(self, items: list) -> None:
        self.next_rng().shuffle(items)

    def pick(self, *options):
        """Uniform pick among labeled options, eg. pick("male", "female")."""
        return self.choice(options)


# ---------------------------- Availability ----------------------------------

class AvailabilityPool:
    """
    Entities of one kind not handed out yet in this session.
    Shuffled once on creation; every draw removes its entity, so taking from
    either end of the list is a random draw without replacement.
    """

    def __init__(self, kind: str, items, rng: SeededRandom):
        self.kind = kind
        self.items = list(items)
        rng.shuffle(self.items)

    def __len__(self):
        return len(self.items)

    def pop_last(self):
        if not self.items:
            raise PoolExhaustedError(self.kind)
        item = self.items.pop()
        logger.debug("Drew %s %r (%d left)", self.kind, item.name, len(self.items))
        return item

    def pop_first(self, predicate, description: str = ""):
        for i, item in enumerate(self.items):
            if predicate(item):
                self.items.pop(i)
                logger.debug("Drew %s %r (%d left)", self.kind, item.name, len(self.items))
                return item
        raise PoolExhaustedError(self.kind, description)


def _tiered(items, tier: DifficultyDegree) -> list:
    return [item for item in items if item.tier <= tier]


class ReplacementCache:
    """keycode -> (entity, keyword) for the wildcards resolved so far."""

    def __init__(self):
        self._entries = {}

    def __contains__(self, keycode: str) -> bool:
        return keycode in self._entries

    def __len__(self):
        return len(self._entries)

    def get(self, keycode: str):
        return self._entries[keycode]

    def put(self, keycode: str, entity, keyword: str) -> None:
        self._entries[keycode] = (entity, keyword)


# ----------------------------- Replacer -------------------------------------

class WildcardReplacer:
    """
    Replaces the wildcards of task prototypes with entities drawn from a catalog.
    One instance is one session: repeated get_task calls keep drawing from the
    same pools and cache.
    """

    def __init__(self, catalog, rng: SeededRandom, tier: DifficultyDegree = DifficultyDegree.EASY):
        self.catalog = catalog
        self.rng = rng
        self.tier = DifficultyDegree.parse(tier)
        self.replacements = ReplacementCache()
        self.wildcards = []
        self.current = 0
        self._evaluators = {
            "category": self._evaluate_category,
            "gesture": self._evaluate_gesture,
            "name": self._evaluate_name,
            "male": self._evaluate_name,
            "female": self._evaluate_name,
            "location": self._evaluate_location,
            "beacon": self._evaluate_location,
            "placement": self._evaluate_location,
            "room": self._evaluate_location,
            "object": self._evaluate_object,
            "aobject": self._evaluate_object,
            "kobject": self._evaluate_object,
            "question": self._evaluate_question,
            "void": self._evaluate_void,
            "pron": self._evaluate_pronoun,
        }
        self._fill_availability_pools()

    def _fill_availability_pools(self):
        c = self.catalog
        self.categories = AvailabilityPool("category", c.categories, self.rng)
        self.gestures = AvailabilityPool("gesture", _tiered(c.gestures, self.tier), self.rng)
        self.locations = AvailabilityPool("location", c.locations, self.rng)
        self.names = AvailabilityPool("name", c.names, self.rng)
        self.objects = AvailabilityPool("object", _tiered(c.objects, self.tier), self.rng)
        self.questions = AvailabilityPool("question", _tiered(c.questions, self.tier), self.rng)

    # ---------------------------- fetchers ----------------------------------

    def _get_category(self, keyword):
        return self.categories.pop_last()

    def _get_gesture(self, keyword):
        return self.gestures.pop_last()

    def _get_question(self, keyword):
        return self.questions.pop_last()

    def _get_location(self, keyword):
        if keyword == "beacon":
            return self.locations.pop_first(lambda l: l.is_beacon, "beacon")
        if keyword == "room":
            return self.locations.pop_first(lambda l: l.is_room, "room")
        if keyword == "placement":
            return self.locations.pop_first(lambda l: l.is_placement, "placement")
        return self.locations.pop_last()

    def _get_name(self, keyword):
        if keyword == "male":
            return self.names.pop_first(lambda n: n.gender == Gender.MALE, "male")
        if keyword == "female":
            return self.names.pop_first(lambda n: n.gender == Gender.FEMALE, "female")
        return self.names.pop_last()

    def _get_object(self, keyword):
        if keyword == "aobject":
            return self.objects.pop_first(lambda o: o.type == ObjectType.ALIKE, "alike")
        if keyword == "kobject":
            return self.objects.pop_first(lambda o: o.type == ObjectType.KNOWN, "known")
        return self.objects.pop_last()

    def _settle_keyword(self, w):
        options = GENERIC_KINDS.get(w.name)
        if options is None:
            return
        if TYPE_KEYWORDS.get(w.type) in options:
            w.keyword = TYPE_KEYWORDS[w.type]
        elif not w.type:
            w.keyword = self.rng.pick(*options)

    def _get_from_pool(self, w, fetcher):
        if w.is_instance:
            self._settle_keyword(w)
            return fetcher(w.keyword)
        if w.keycode in self.replacements:
            entity, w.keyword = self.replacements.get(w.keycode)
            logger.debug("Reusing %r for %s", entity.name, w.keycode)
            return entity
        self._settle_keyword(w)
        entity = fetcher(w.keyword)
        self.replacements.put(w.keycode, entity, w.keyword)
        return entity

    # ---------------------------- evaluators --------------------------------

    def _evaluate_category(self, w):
        return self._get_from_pool(w, self._get_category)

    def _evaluate_gesture(self, w):
        return self._get_from_pool(w, self._get_gesture)

    def _evaluate_name(self, w):
        return self._get_from_pool(w, self._get_name)

    def _evaluate_location(self, w):
        return self._get_from_pool(w, self._get_location)

    def _evaluate_object(self, w):
        return self._get_from_pool(w, self._get_object)

    def _evaluate_question(self, w):
        return self._get_from_pool(w, self._get_question)

    def _evaluate_void(self, w):
        return HiddenTaskElement()

    def _evaluate_pronoun(self, w):
        """
        Pronoun for the nearest earlier person; failing that, for the nearest
        earlier wildcard that shows something.
        """
        previous = self.wildcards[:self.current]
        prev = next((p for p in reversed(previous) if p.keyword in ("name", "male", "female")), None)
        if prev is None:
            prev = next((p for p in reversed(previous) if p.keyword not in ("void", "pron")), None)
        if prev is None:
            return NamedTaskElement("them")
        return NamedTaskElement(PRONOUNS.get(prev.keyword, "them"))

    def find_replacement(self, w):
        """
        Entity for one wildcard, or None when its name is not a known kind.
        Raises PoolExhaustedError when a required draw finds nothing left.
        """
        if not w.success:
            w.keyword = "void"
            return HiddenTaskElement()
        evaluator = self._evaluators.get(w.name)
        if evaluator is None:
            return None
        return evaluator(w)

    # ---------------------------- obfuscation -------------------------------

    @staticmethod
    def _obfuscate(w, entity):
        """
        Coarser stand-in for 'entity', or None when this kind is shown as is.
        """
        if w.name in ("beacon", "placement"):
            return entity.room
        if w.name in ("object", "aobject", "kobject"):
            return entity.category
        if w.name in ("name", "male", "female"):
            return Obfuscator("a person")
        if w.name == "category":
            return Obfuscator("objects")
        if w.name == "location":
            return Obfuscator("somewhere")
        if w.name == "room":
            return Obfuscator("apartment")
        return None

    # ---------------------------- metadata ----------------------------------

    def _fetch_metadata(self, w, _depth=0) -> list[str]:
        if not w.metadata:
            return []
        nested = []
        text = self.replace_nested_wildcards(w.metadata, _depth=_depth, _nested_metadata=nested)
        return METADATA_SPLIT_PATTERN.split(text) + nested

    def replace_nested_wildcards(self, text: str, _depth=0, _nested_metadata=None) -> str:
        """
        Substitutes every wildcard in 'text' through this session's cache and pools.
        Metadata carried by those wildcards is resolved one level deeper and
        collected into '_nested_metadata' when given.
        """
        if _depth >= MAX_NESTED_DEPTH:
            logger.warning("Metadata nested deeper than %d levels, left as is: %r", MAX_NESTED_DEPTH, text)
            return text

        out = []
        i = 0
        L = len(text)
        while i < L:
            if text[i] != "{":
                out.append(text[i])
                i += 1
                continue
            w, next_i = extract_wildcard(text, i)
            if w is None:
                out.append(text[i])
                i = next_i
                continue
            replacement = self.find_replacement(w)
            out.append(w.value if replacement is None else replacement.name)
            if w.metadata and _nested_metadata is not None:
                _nested_metadata.extend(self._fetch_metadata(w, _depth + 1))
            i = next_i
        return "".join(out)

    # ---------------------------- tokenizing --------------------------------

    def _tokenize_wildcard(self, w) -> Token:
        replacement = self.find_replacement(w)
        metadata = self._fetch_metadata(w)
        if replacement is None:
            # unknown kind: keep the source text
            return Token(w.value, None, metadata)
        if w.obfuscated:
            obfuscated = self._obfuscate(w, replacement)
            if obfuscated is not None:
                metadata.append(replacement.name)
                return Token(w.value, obfuscated, metadata)
        return Token(w.value, replacement, metadata)

    def get_task(self, prototype: str) -> Task:
        """
        Produces a Task from a task prototype string by replacing all its wildcards.
        """
        self.wildcards = find_wildcards(prototype)
        tokens = []
        cursor = 0
        for ix, w in enumerate(self.wildcards):
            self.current = ix
            if cursor < w.index:
                tokens.append(Token(prototype[cursor:w.index]))
            cursor = max(cursor, w.end)
            tokens.append(self._tokenize_wildcard(w))
        if cursor < len(prototype):
            tokens.append(Token(prototype[cursor:]))
        return Task(tokens)


# ---------------------------- Entry points ----------------------------------

def generate_task(prototype: str,
                  catalog,
                  seed: int = 0,
                  tier: DifficultyDegree = DifficultyDegree.EASY) -> Task:
    """
    One fresh session: new pools, new cache, new RNG seeded with 'seed'.
    """
    return WildcardReplacer(catalog, SeededRandom(seed), tier).get_task(prototype)


def generate_tasks(prototypes,
                   catalog,
                   seed: int = 0,
                   tier: DifficultyDegree = DifficultyDegree.EASY,
                   count: int = 1) -> list[Task]:
    """
    'count' independent tasks. 'prototypes' is prototype text (one per line,
    optional %w% weights), a list of lines or a parsed PrototypeList; every task
    picks its own prototype.
    Each session gets an RNG derived from the master seed so sessions never
    share random state.
    """
    master = SeededRandom(seed)
    tasks = []
    for _ in range(count):
        session_seed = master.next_rng().getrandbits(64)
        rng = SeededRandom(session_seed)
        prototype = pick_prototype(prototypes, rng)
        if prototype is None:
            break
        tasks.append(WildcardReplacer(catalog, rng, tier).get_task(prototype))
    return tasks
