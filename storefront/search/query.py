"""
Web-search style query terms.

Supported syntax mirrors ``websearch_to_tsquery``: words are AND-ed,
``or`` between words means OR (binding looser than AND), a leading ``-``
negates the next word or quoted phrase, and ``"quoted text"`` is a phrase
whose words must appear at the same relative positions.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple, Union
from storefront.search.text import get_normalizer
from storefront.search.vector import SearchVector

_TOKEN = re.compile(r'(-?)"([^"]*)"?|(-?)([^\s"]+)')


@dataclass(frozen=True)
class Term:
    lexeme: str


@dataclass(frozen=True)
class Phrase:
    # (offset from the first lexeme, lexeme)
    members: Tuple[Tuple[int, str], ...]


@dataclass(frozen=True)
class Not:
    child: "Node"


@dataclass(frozen=True)
class And:
    children: Tuple["Node", ...]


@dataclass(frozen=True)
class Or:
    children: Tuple["Node", ...]


Node = Union[Term, Phrase, Not, And, Or]


class QueryTerm:
    """A parsed, normalized search query for one language."""

    def __init__(self, root: Optional[Node], language: str, text: str = ""):
        self.root = root
        self.language = language
        self.text = text

    @classmethod
    def parse(cls, text: Optional[str], language: str) -> "QueryTerm":
        """
        Build a query term from user input.

        Args:
            text: Raw query text
            language: "en" or "ru"

        Returns:
            QueryTerm; ``is_empty`` is true when nothing searchable remains
        """
        if not text or not text.strip():
            return cls(None, language, text or "")

        normalizer = get_normalizer(language)
        disjuncts: List[List[Node]] = [[]]
        pending_or = False

        for match in _TOKEN.finditer(text):
            if match.group(2) is not None:
                negated, body, quoted = match.group(1) == "-", match.group(2), True
            else:
                negated, body, quoted = match.group(3) == "-", match.group(4), False

            if not quoted and body.lower() == "or" and not negated:
                pending_or = True
                continue

            tokens = normalizer.tokenize(body)
            if quoted:
                groups = [tokens]
            else:
                groups = [[token for token in tokens if token.word == word]
                          for word in sorted({token.word for token in tokens})]

            nodes = [node for node in (_operand(group) for group in groups) if node is not None]
            if not nodes:
                continue
            if negated:
                nodes[0] = Not(nodes[0])

            if pending_or and disjuncts[-1]:
                disjuncts.append([])
            pending_or = False
            disjuncts[-1].extend(nodes)

        branches = [_and(nodes) for nodes in disjuncts if nodes]
        if not branches:
            root = None
        elif len(branches) == 1:
            root = branches[0]
        else:
            root = Or(tuple(branches))
        return cls(root, language, text)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def lexemes(self) -> FrozenSet[str]:
        """Lexemes that count positively (not under a negation)."""
        found = set()
        _collect(self.root, found)
        return frozenset(found)

    def matches(self, vector: SearchVector) -> bool:
        """Equivalent of ``query @@ vector``. An empty query matches nothing."""
        if self.root is None:
            return False
        return _evaluate(self.root, vector)

    def satisfied_by(self, present: FrozenSet[str]) -> bool:
        """Whether a window holding ``present`` lexemes satisfies the query."""
        if self.root is None:
            return False
        return _satisfied(self.root, present)

    def to_tsquery(self) -> str:
        """Render as a PostgreSQL tsquery literal of already-normalized lexemes."""
        if self.root is None:
            return ""
        return _render(self.root)

    def __repr__(self) -> str:
        return f"QueryTerm({self.to_tsquery()!r}, language={self.language!r})"


def _operand(tokens) -> Optional[Node]:
    """One word or quoted string becomes a term or a phrase."""
    kept = [token for token in tokens if token.lexeme is not None]
    if not kept:
        return None
    if len(kept) == 1:
        return Term(kept[0].lexeme)
    first = kept[0].position
    return Phrase(tuple((token.position - first, token.lexeme) for token in kept))


def _and(nodes: List[Node]) -> Node:
    if len(nodes) == 1:
        return nodes[0]
    return And(tuple(nodes))


def _collect(node: Optional[Node], found: set) -> None:
    if node is None or isinstance(node, Not):
        return
    if isinstance(node, Term):
        found.add(node.lexeme)
    elif isinstance(node, Phrase):
        found.update(lexeme for _, lexeme in node.members)
    else:
        for child in node.children:
            _collect(child, found)


def _evaluate(node: Node, vector: SearchVector) -> bool:
    if isinstance(node, Term):
        return node.lexeme in vector
    if isinstance(node, Phrase):
        return _phrase_matches(node, vector)
    if isinstance(node, Not):
        return not _evaluate(node.child, vector)
    if isinstance(node, And):
        return all(_evaluate(child, vector) for child in node.children)
    return any(_evaluate(child, vector) for child in node.children)


def _phrase_matches(phrase: Phrase, vector: SearchVector) -> bool:
    positions = [
        {position for position, _ in vector.occurrences(lexeme)}
        for _, lexeme in phrase.members
    ]
    if not all(positions):
        return False
    for start in positions[0]:
        if all(start + offset in positions[i] for i, (offset, _) in enumerate(phrase.members)):
            return True
    return False


def _satisfied(node: Node, present: FrozenSet[str]) -> bool:
    # Phrases only need all their lexemes inside the window
    if isinstance(node, Term):
        return node.lexeme in present
    if isinstance(node, Phrase):
        return all(lexeme in present for _, lexeme in node.members)
    if isinstance(node, Not):
        return not _satisfied(node.child, present)
    if isinstance(node, And):
        return all(_satisfied(child, present) for child in node.children)
    return any(_satisfied(child, present) for child in node.children)


def _quote(lexeme: str) -> str:
    return "'" + lexeme.replace("\\", "\\\\").replace("'", "''") + "'"


def _render(node: Node) -> str:
    if isinstance(node, Term):
        return _quote(node.lexeme)
    if isinstance(node, Phrase):
        rendered = _quote(node.members[0][1])
        previous = node.members[0][0]
        for offset, lexeme in node.members[1:]:
            distance = offset - previous
            operator = "<->" if distance == 1 else f"<{distance}>"
            rendered += f" {operator} {_quote(lexeme)}"
            previous = offset
        return f"( {rendered} )"
    if isinstance(node, Not):
        return f"!{_render(node.child)}"
    joiner = " & " if isinstance(node, And) else " | "
    return "( " + joiner.join(_render(child) for child in node.children) + " )"
