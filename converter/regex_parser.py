from abc import abstractmethod, ABC
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

from .automaton import EPSILON, EMPTY_LANGUAGE
from .conf import DEFAULT_MAX_REGEX_DEPTH
from .errors import AutomatonTooLargeError, RegexSyntaxError

# Token kinds
LITERAL = 'LITERAL'
EPSILON_ATOM = 'EPSILON'
EMPTY_SET_ATOM = 'EMPTY_SET'
UNION_OP = 'UNION'
STAR_OP = 'STAR'
LPAREN = 'LPAREN'
RPAREN = 'RPAREN'

_OPERATORS = {'|': UNION_OP, '*': STAR_OP, '(': LPAREN, ')': RPAREN}
_UNSUPPORTED_OPERATORS = '+?[]{}.^$\\'


def is_literal_symbol(char: str) -> bool:
    """Literals are single ASCII letters and digits."""
    return char.isascii() and char.isalnum()


class Token(NamedTuple):
    kind: str
    value: str
    position: int


def tokenize(regex: str) -> List[Token]:
    """
    Split a regex into tokens.

    Raises:
        RegexSyntaxError: On any character outside the supported syntax.
    """
    tokens = []
    for position, char in enumerate(regex):
        if char in _OPERATORS:
            tokens.append(Token(_OPERATORS[char], char, position))
        elif char == EPSILON:
            tokens.append(Token(EPSILON_ATOM, char, position))
        elif char == EMPTY_LANGUAGE:
            tokens.append(Token(EMPTY_SET_ATOM, char, position))
        elif is_literal_symbol(char):
            tokens.append(Token(LITERAL, char, position))
        elif char in _UNSUPPORTED_OPERATORS:
            raise RegexSyntaxError(f"Unsupported operator '{char}' at position {position}", position)
        else:
            raise RegexSyntaxError(f"Invalid character '{char}' at position {position}", position)
    return tokens


class RegexNode(ABC):
    """Base class for regex AST nodes."""

    @abstractmethod
    def to_string(self) -> str:
        """Convert node back to regex string."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Number of leaves in the tree."""
        pass

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class Literal(RegexNode):
    """A single alphabet symbol."""
    symbol: str

    def to_string(self) -> str:
        return self.symbol

    def size(self) -> int:
        return 1


@dataclass(frozen=True)
class Epsilon(RegexNode):
    """Epsilon (empty string) node."""

    def to_string(self) -> str:
        return EPSILON

    def size(self) -> int:
        return 1


@dataclass(frozen=True)
class EmptySet(RegexNode):
    """Empty language node (∅)."""

    def to_string(self) -> str:
        return EMPTY_LANGUAGE

    def size(self) -> int:
        return 1


@dataclass(frozen=True)
class Concat(RegexNode):
    """Concatenation of two or more parts, in order."""
    parts: Tuple[RegexNode, ...]

    def to_string(self) -> str:
        # Unions bind looser than concatenation
        return ''.join(f"({part.to_string()})" if isinstance(part, Union) else part.to_string()
                       for part in self.parts)

    def size(self) -> int:
        return sum(part.size() for part in self.parts)


@dataclass(frozen=True)
class Union(RegexNode):
    """Union of two or more alternatives."""
    options: Tuple[RegexNode, ...]

    def to_string(self) -> str:
        return '|'.join(option.to_string() for option in self.options)

    def size(self) -> int:
        return sum(option.size() for option in self.options)


@dataclass(frozen=True)
class Star(RegexNode):
    """Kleene star node (R*)."""
    inner: RegexNode

    def to_string(self) -> str:
        inner_str = self.inner.to_string()
        if isinstance(self.inner, (Union, Concat)) or (isinstance(self.inner, Literal) and len(inner_str) > 1):
            inner_str = f"({inner_str})"
        return f"{inner_str}*"

    def size(self) -> int:
        return self.inner.size()


def concat(*nodes: RegexNode) -> RegexNode:
    """Concatenate nodes, applying εR = R and ∅R = ∅."""
    parts = []
    for node in nodes:
        if isinstance(node, EmptySet):
            return EmptySet()
        if isinstance(node, Epsilon):
            continue
        if isinstance(node, Concat):
            parts.extend(node.parts)
        else:
            parts.append(node)

    if not parts:
        return Epsilon()
    if len(parts) == 1:
        return parts[0]
    return Concat(tuple(parts))


def union(*nodes: RegexNode) -> RegexNode:
    """Union nodes, applying ∅|R = R and R|R = R."""
    options = []
    for node in nodes:
        candidates = node.options if isinstance(node, Union) else (node,)
        for candidate in candidates:
            if not isinstance(candidate, EmptySet) and candidate not in options:
                options.append(candidate)

    if not options:
        return EmptySet()
    if len(options) == 1:
        return options[0]
    return Union(tuple(options))


def star(node: RegexNode) -> RegexNode:
    """Apply the Kleene star, with ε* = ∅* = ε and (R*)* = R*."""
    if isinstance(node, (Epsilon, EmptySet)):
        return Epsilon()
    if isinstance(node, Star):
        return node
    return Star(node)


def _children(node: RegexNode) -> Tuple[RegexNode, ...]:
    if isinstance(node, Concat):
        return node.parts
    if isinstance(node, Union):
        return node.options
    if isinstance(node, Star):
        return (node.inner,)
    return ()


def nesting_depth(node: RegexNode) -> int:
    """Height of the tree, a leaf counting as 1. Iterative, so any height is safe."""
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in _children(current))
    return deepest


class RegexParser:
    """
    Recursive-descent parser producing a regex AST.

    Grammar, lowest to highest precedence::

        union  := concat ('|' concat)*
        concat := postfix*
        postfix:= atom '*'*
        atom   := LITERAL | 'ε' | '∅' | '(' union ')'

    An empty concatenation (``""``, ``"()"``, ``"a|"``) denotes ε.

    Groups may nest at most ``max_depth`` deep, and so may the resulting
    tree; deeper input raises AutomatonTooLargeError.
    """

    def __init__(self, regex: str, max_depth: int = DEFAULT_MAX_REGEX_DEPTH):
        self.regex = regex
        self.tokens = tokenize(regex)
        self.pos = 0
        self.max_depth = max_depth
        self.group_depth = 0

    def peek(self) -> Optional[Token]:
        """Look at current token without consuming."""
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def consume(self) -> Token:
        """Consume and return current token."""
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def parse(self) -> RegexNode:
        """Parse regex and return AST root."""
        result = self.parse_union()
        token = self.peek()
        if token is not None:
            # Only a ')' can stop parse_union before the end
            raise RegexSyntaxError(
                f"Unbalanced parentheses: unexpected ')' at position {token.position}", token.position)

        if nesting_depth(result) > self.max_depth:
            raise self._too_deep()
        return result

    def _too_deep(self) -> AutomatonTooLargeError:
        return AutomatonTooLargeError(
            f"Regular expression nests deeper than {self.max_depth} levels; "
            f"the expression is too large to convert", self.max_depth)

    def parse_union(self) -> RegexNode:
        """Parse union (|) - lowest precedence."""
        options = [self.parse_concat()]
        while self.peek() is not None and self.peek().kind == UNION_OP:
            self.consume()
            options.append(self.parse_concat())

        if len(options) == 1:
            return options[0]
        return Union(tuple(options))

    def parse_concat(self) -> RegexNode:
        """Parse concatenation - implicit, higher precedence than union."""
        parts = []
        while self.peek() is not None and self.peek().kind not in (UNION_OP, RPAREN):
            parts.append(self.parse_postfix())

        if not parts:
            return Epsilon()
        if len(parts) == 1:
            return parts[0]
        return Concat(tuple(parts))

    def parse_postfix(self) -> RegexNode:
        """Parse the postfix star - highest precedence operator."""
        node = self.parse_atom()
        while self.peek() is not None and self.peek().kind == STAR_OP:
            self.consume()
            node = Star(node)
        return node

    def parse_atom(self) -> RegexNode:
        """Parse atomic expressions."""
        token = self.consume()

        if token.kind == LPAREN:
            self.group_depth += 1
            if self.group_depth > self.max_depth:
                raise self._too_deep()
            inner = self.parse_union()
            closing = self.peek()
            if closing is None or closing.kind != RPAREN:
                raise RegexSyntaxError(
                    f"Unbalanced parentheses: '(' at position {token.position} is never closed",
                    token.position)
            self.consume()
            self.group_depth -= 1
            return inner

        if token.kind == LITERAL:
            return Literal(token.value)

        if token.kind == EPSILON_ATOM:
            return Epsilon()

        if token.kind == EMPTY_SET_ATOM:
            return EmptySet()

        # parse_concat never hands us '|' or ')', so this is a '*'
        raise RegexSyntaxError(
            f"Unexpected '*' at position {token.position} - the star requires a preceding element",
            token.position)


def parse_regex(regex: str, max_depth: int = DEFAULT_MAX_REGEX_DEPTH) -> RegexNode:
    return RegexParser(regex, max_depth=max_depth).parse()
