"""
Command Generator: prototypes
Weighted task prototype lists.

One prototype per line. Lines starting with '#' are comments; a %w% tag
anywhere on the line sets its weight (default 1.0), '\\%' keeps a literal percent.

  go to the {room 1}, find {name 1} and ask {pron} {question}
  bring me the {object known} from the {placement 1} %2.5%
"""

import bisect
import itertools
import logging
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

WEIGHT_PATTERN = re.compile(r"(?<!\\)%([0-9]*\.?[0-9]+)%")


class PrototypeList(NamedTuple):
    """Parsed prototypes; the text is final, escapes already undone."""
    items: list
    weights: list


def parse_prototype_line(raw: str):
    """
    (text, weight) for one line, or None for blanks and comments.
    """
    line = raw.strip()
    if not line or line.startswith("#"):
        return None
    weight = 1.0
    tag = WEIGHT_PATTERN.search(line)
    if tag:
        weight = float(tag.group(1))
        line = f"{line[:tag.start()]}{line[tag.end():]}".strip()
    text = line.replace("\\%", "%")
    return (text, weight) if text else None


def parse_prototypes(lines_iterable) -> PrototypeList:
    parsed = [p for p in map(parse_prototype_line, lines_iterable) if p is not None]
    return PrototypeList([text for text, _ in parsed], [w for _, w in parsed])


def load_prototype_file(filepath: str) -> PrototypeList:
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return parse_prototypes(f)
    except OSError:
        logger.warning("Could not read prototype file %s", filepath)
        return PrototypeList([], [])


def weighted_index(weights, rng) -> int:
    """
    Index drawn in proportion to 'weights'. Uniform when they sum to zero.
    """
    if not weights:
        return 0
    bounds = list(itertools.accumulate(weights))
    if bounds[-1] <= 0:
        return rng.randint(0, len(weights) - 1)
    return min(bisect.bisect_right(bounds, rng.random() * bounds[-1]), len(weights) - 1)


def pick_prototype(prototypes, rng):
    """
    One prototype out of a PrototypeList, text (split on newlines) or a list
    of lines. None when nothing usable is left after dropping comments and blanks.
    """
    if isinstance(prototypes, str):
        prototypes = prototypes.splitlines()
    if not isinstance(prototypes, PrototypeList):
        prototypes = parse_prototypes(prototypes)
    if not prototypes.items:
        return None
    chosen = prototypes.items[weighted_index(prototypes.weights, rng)]
    logger.debug("Picked prototype %r", chosen)
    return chosen
