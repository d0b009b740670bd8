"""
Command Generator: wildcard
Parsing of brace wildcards inside task prototypes.

  {name}                      any person name
  {name male 1}               a male name, slot 1 ({name:male#1} works too)
  {object known?}             a known object, shown as its category
  {beacon 1002}               always a fresh beacon (id >= 1000 skips the cache)
  {void meta: {name 1} waits at the {beacon 1}}
                              nothing visible, resolved metadata for the grader

Braces nest; a '{' that does not open a well-formed wildcard is plain text.
"""

import re

INSTANCE_ID_BASE = 1000

# type qualifiers that pin down the keyword of a wildcard
TYPE_KEYWORDS = {
    "male": "male",
    "female": "female",
    "beacon": "beacon",
    "room": "room",
    "placement": "placement",
    "alike": "aobject",
    "known": "kobject",
}

# generic kinds settle on one of these keywords when no type is given
GENERIC_KINDS = {
    "name": ("male", "female"),
    "location": ("beacon", "room", "placement"),
    "object": ("kobject", "aobject"),
}

WILDCARD_BODY_PATTERN = re.compile(
    r"\s*(?P<name>[A-Za-z_]\w*)"
    r"(?:(?:\s*:\s*|\s+)(?P<type>(?!meta\b)[A-Za-z_]\w*))?"
    r"(?:(?:\s*#\s*|\s+)(?P<id>\d+))?"
    r"\s*(?P<obfuscated>\?)?"
    r"(?:\s*\bmeta\s*:(?P<meta>.*))?"
    r"\s*",
    re.DOTALL | re.IGNORECASE,
)


class Wildcard:
    """
    One wildcard occurrence. 'keyword' starts as the name and is settled by the
    replacer (eg. a bare {name} becomes 'male' or 'female' once evaluated).
    """

    def __init__(self, value: str, index: int, name: str = "", type: str = "",
                 id: int | None = None, obfuscated: bool = False, metadata: str = ""):
        self.value = value
        self.index = index
        self.name = name
        self.type = type
        self.id = id
        self.obfuscated = obfuscated
        self.metadata = metadata
        self.keyword = name

    @property
    def success(self) -> bool:
        return bool(self.name)

    @property
    def is_instance(self) -> bool:
        return self.id is not None and self.id >= INSTANCE_ID_BASE

    @property
    def end(self) -> int:
        return self.index + len(self.value)

    @property
    def keycode(self) -> str:
        """
        Cache slot. A type only collapses onto its keyword when it is a valid
        choice for the name ({location beacon} and {beacon} share "beacon");
        otherwise the pair stays qualified ({name beacon} is "name:beacon").
        """
        keyword = TYPE_KEYWORDS.get(self.type)
        if not self.type:
            kind = self.name
        elif keyword is not None and (keyword == self.name or keyword in GENERIC_KINDS.get(self.name, ())):
            kind = keyword
        else:
            kind = f"{self.name}:{self.type}"
        return kind if self.id is None else f"{kind}{self.id}"

    def __repr__(self):
        return f"Wildcard({self.value!r} @ {self.index})"


def _find_closing_brace(text: str, start: int) -> int:
    """
    Index of the '}' matching the '{' at 'start', or -1 when unbalanced.
    """
    depth = 0
    for i in range(start, len(text)):
        c = text[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def extract_wildcard(text: str, index: int):
    """
    Try to read a wildcard starting at text[index] == '{'.
    Returns (wildcard, next_index) on success, (None, index + 1) otherwise.
    """
    end = _find_closing_brace(text, index)
    if end < 0:
        return None, index + 1

    value = text[index:end + 1]
    body = text[index + 1:end]

    if not body.strip():
        return Wildcard(value, index), end + 1

    m = WILDCARD_BODY_PATTERN.fullmatch(body)
    if not m:
        return None, index + 1

    wildcard = Wildcard(
        value,
        index,
        name=m.group("name").lower(),
        type=(m.group("type") or "").lower(),
        id=int(m.group("id")) if m.group("id") else None,
        obfuscated=bool(m.group("obfuscated")),
        metadata=(m.group("meta") or "").strip(),
    )
    return wildcard, end + 1


def find_wildcards(text: str) -> list[Wildcard]:
    wildcards = []
    i = 0
    L = len(text)
    while i < L:
        if text[i] == "{":
            w, i = extract_wildcard(text, i)
            if w is not None:
                wildcards.append(w)
            continue
        i += 1
    return wildcards
