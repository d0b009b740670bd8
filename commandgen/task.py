"""
Command Generator: task
Tokens and the finished Task they form.
"""


class NamedTaskElement:
    """Anything with a display name that is not a catalog entity (pronouns, obfuscators)."""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class HiddenTaskElement(NamedTaskElement):
    """Consumes a wildcard without producing text."""

    def __init__(self):
        super().__init__("")


class Obfuscator(NamedTaskElement):
    """Generic stand-in shown instead of a concealed entity."""


class Token:
    """
    A literal span (value is None) or a resolved wildcard.
    key holds the source text the token came from.
    """

    def __init__(self, key: str, value=None, metadata=None):
        self.key = key
        self.value = value
        self.metadata = list(metadata) if metadata else []

    @property
    def is_literal(self) -> bool:
        return self.value is None

    @property
    def text(self) -> str:
        if self.value is None:
            return self.key
        return self.value.name

    def __str__(self):
        return self.text

    def __repr__(self):
        return f"Token({self.key!r}, {self.value!r}, {self.metadata!r})"


class Task:
    def __init__(self, tokens):
        self.tokens = tuple(tokens)

    @property
    def metadata(self) -> list[str]:
        lines = []
        for token in self.tokens:
            lines.extend(token.metadata)
        return lines

    def __iter__(self):
        return iter(self.tokens)

    def __len__(self):
        return len(self.tokens)

    def __str__(self):
        return "".join(token.text for token in self.tokens)

    def __repr__(self):
        return f"Task({str(self)!r})"
