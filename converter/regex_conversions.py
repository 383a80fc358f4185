import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .automaton import Automaton, Transition, EPSILON, EMPTY_LANGUAGE, fresh_name
from .conf import (
    DEFAULT_MAX_DFA_STATES, DEFAULT_MAX_ELIMINATION_STATES, DEFAULT_MAX_LABEL_SIZE, DEFAULT_MAX_REGEX_DEPTH,
)
from .errors import AutomatonTooLargeError, RegexSyntaxError
from .fsa_transformations import SubsetConstructor
from .regex_parser import (
    RegexNode, Literal, Epsilon, EmptySet, Concat, Union, Star,
    RegexParser, concat, union, star, is_literal_symbol,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    """Entry and exit state of a partially built NFA."""
    start: str
    end: str


class NFABuilder:
    """Helper class to build NFAs. Owns the state counter of one conversion."""

    def __init__(self):
        self.state_counter = 0
        self.states: List[str] = []
        self.transitions: List[Transition] = []

    def new_state(self) -> str:
        """Generate a new unique state."""
        state = f"q{self.state_counter}"
        self.state_counter += 1
        self.states.append(state)
        return state

    def add_transition(self, from_state: str, symbol: str, to_state: str):
        self.transitions.append(Transition(from_state, to_state, symbol))

    def build(self, node: RegexNode) -> Fragment:
        """Compile an AST node to a fragment using Thompson's construction."""
        if isinstance(node, Union):
            start = self.new_state()
            end = self.new_state()
            for option in node.options:
                branch = self.build(option)
                self.add_transition(start, EPSILON, branch.start)
                self.add_transition(branch.end, EPSILON, end)
            return Fragment(start, end)

        if isinstance(node, Concat):
            fragments = [self.build(part) for part in node.parts]
            for left, right in zip(fragments, fragments[1:]):
                self.add_transition(left.end, EPSILON, right.start)
            return Fragment(fragments[0].start, fragments[-1].end)

        if isinstance(node, Star):
            inner = self.build(node.inner)
            start = self.new_state()
            end = self.new_state()
            self.add_transition(start, EPSILON, inner.start)  # enter
            self.add_transition(start, EPSILON, end)  # bypass
            self.add_transition(inner.end, EPSILON, end)  # exit
            self.add_transition(inner.end, EPSILON, inner.start)  # loop
            return Fragment(start, end)

        start = self.new_state()
        end = self.new_state()
        if isinstance(node, Literal):
            self.add_transition(start, node.symbol, end)
        elif isinstance(node, Epsilon):
            self.add_transition(start, EPSILON, end)
        elif not isinstance(node, EmptySet):
            raise TypeError(f"Unknown regex node {node!r}")
        return Fragment(start, end)

    def to_automaton(self, fragment: Fragment, alphabet: List[str]) -> Automaton:
        return Automaton(
            states=tuple(self.states),
            transitions=tuple(self.transitions),
            alphabet=tuple(alphabet),
            initial_state=fragment.start,
            accepting_states=(fragment.end,),
        )


class RegexToNFA:
    """Converts a regular expression to an ε-NFA using Thompson's construction."""

    def __init__(self, max_depth: int = DEFAULT_MAX_REGEX_DEPTH):
        self.max_depth = max_depth

    def convert(self, regex: str) -> Automaton:
        """
        Args:
            regex (str): The regular expression to convert. Supports:
                - Single letters and digits: a, b, 0, 1, etc.
                - Epsilon: ε, or any empty sub-pattern ("", "()", "a|")
                - Empty language: ∅
                - Union: | (e.g., "a|b")
                - Concatenation: implicit (e.g., "ab")
                - Kleene star: * (e.g., "a*")
                - Parentheses: () for grouping

        Returns:
            Automaton: An ε-NFA with a single accepting state

        Raises:
            RegexSyntaxError: If the regex is malformed
            AutomatonTooLargeError: If the regex nests deeper than ``max_depth``
        """
        ast = RegexParser(regex, max_depth=self.max_depth).parse()

        # A fresh builder per call restarts state numbering at q0
        builder = NFABuilder()
        fragment = builder.build(ast)
        alphabet = sorted({char for char in regex if is_literal_symbol(char)})

        logger.debug("Thompson construction for %r: %d states, %d transitions",
                     regex, len(builder.states), len(builder.transitions))
        return builder.to_automaton(fragment, alphabet)


class GNFA:
    """
    Generalised NFA for state elimination algorithm.

    Every ordered pair of states carries at most one label, a regex AST;
    adding a second label for the same pair unions it with the first.
    """

    def __init__(self, max_label_size: int = DEFAULT_MAX_LABEL_SIZE):
        self.states: List[str] = []
        self.transitions: Dict[str, Dict[str, RegexNode]] = {}  # state -> state -> regex
        self.start_state: Optional[str] = None
        self.accept_state: Optional[str] = None
        self.max_label_size = max_label_size

    def add_state(self, state: str):
        if state not in self.transitions:
            self.states.append(state)
            self.transitions[state] = {}

    def label(self, from_state: str, to_state: str) -> Optional[RegexNode]:
        return self.transitions.get(from_state, {}).get(to_state)

    def add_transition(self, from_state: str, to_state: str, regex: RegexNode):
        """Add a transition labeled with a regex, merging with any existing label."""
        existing = self.transitions[from_state].get(to_state)
        merged = regex if existing is None else union(existing, regex)
        if isinstance(merged, EmptySet):
            return

        if merged.size() > self.max_label_size:
            raise AutomatonTooLargeError(
                f"State elimination produced a label with more than {self.max_label_size} symbols; "
                f"the automaton is too large to convert", self.max_label_size)
        self.transitions[from_state][to_state] = merged

    def remove_state(self, state: str):
        """Remove a state and update transitions using state elimination."""
        if state == self.start_state or state == self.accept_state:
            return  # Never remove start or accept state

        incoming = [(source, labels[state]) for source, labels in self.transitions.items()
                    if source != state and state in labels]
        outgoing = [(target, regex) for target, regex in self.transitions[state].items() if target != state]
        self_loop = self.transitions[state].get(state)
        loop = star(self_loop) if self_loop is not None else Epsilon()

        # A pair with from_state == to_state becomes (part of) a self-loop there
        for from_state, in_regex in incoming:
            for to_state, out_regex in outgoing:
                self.add_transition(from_state, to_state, concat(in_regex, loop, out_regex))

        self.states.remove(state)
        del self.transitions[state]
        for labels in self.transitions.values():
            labels.pop(state, None)


def fsa_to_gnfa(fsa: Automaton, max_label_size: int = DEFAULT_MAX_LABEL_SIZE) -> GNFA:
    """Convert an automaton to a GNFA with fresh start and accept sentinels."""
    gnfa = GNFA(max_label_size=max_label_size)

    new_start = fresh_name('start', fsa.states)
    new_accept = fresh_name('end', set(fsa.states) | {new_start})
    for state in (new_start, *fsa.states, new_accept):
        gnfa.add_state(state)
    gnfa.start_state = new_start
    gnfa.accept_state = new_accept

    gnfa.add_transition(new_start, fsa.initial_state, Epsilon())
    for accept_state in fsa.accepting_states:
        gnfa.add_transition(accept_state, new_accept, Epsilon())

    for transition in fsa.transitions:
        label = Epsilon() if transition.is_epsilon else Literal(transition.symbol)
        gnfa.add_transition(transition.from_state, transition.to_state, label)

    return gnfa


class StateEliminator:
    """
    Converts a finite automaton to a regular expression by state elimination.

    States are eliminated in the automaton's own state order, so the same
    input always yields the same regex string.
    """

    def __init__(self, max_states: int = DEFAULT_MAX_ELIMINATION_STATES,
                 max_label_size: int = DEFAULT_MAX_LABEL_SIZE):
        self.max_states = max_states
        self.max_label_size = max_label_size

    def convert(self, dfa: Automaton) -> str:
        """
        Returns:
            str: The regex, or ∅ if no accepting state is reachable
        """
        if len(dfa.states) > self.max_states:
            raise AutomatonTooLargeError(
                f"State elimination is limited to {self.max_states} states, "
                f"got {len(dfa.states)}", self.max_states)

        gnfa = fsa_to_gnfa(dfa, max_label_size=self.max_label_size)
        for state in dfa.states:
            gnfa.remove_state(state)

        final_regex = gnfa.label(gnfa.start_state, gnfa.accept_state)
        if final_regex is None:
            return EMPTY_LANGUAGE  # Empty language

        result = final_regex.to_string()
        logger.debug("State elimination of %d states produced a regex of length %d",
                     len(dfa.states), len(result))
        return result


class NFAToRegex:
    """NFA to regex via the subset construction followed by state elimination."""

    def __init__(self, max_dfa_states: int = DEFAULT_MAX_DFA_STATES,
                 max_elimination_states: int = DEFAULT_MAX_ELIMINATION_STATES,
                 max_label_size: int = DEFAULT_MAX_LABEL_SIZE):
        self.subset_constructor = SubsetConstructor(max_states=max_dfa_states)
        self.state_eliminator = StateEliminator(max_states=max_elimination_states,
                                                max_label_size=max_label_size)

    def convert(self, nfa: Automaton) -> str:
        return self.state_eliminator.convert(self.subset_constructor.convert(nfa))


def regex_to_epsilon_nfa(regex: str, max_depth: int = DEFAULT_MAX_REGEX_DEPTH) -> Automaton:
    """
    Convert a regular expression to an ε-NFA using Thompson's construction.

    Examples:
        regex_to_epsilon_nfa("a*b")       # a's followed by one b
        regex_to_epsilon_nfa("(a|b)*abb") # strings over {a, b} ending in abb
    """
    return RegexToNFA(max_depth=max_depth).convert(regex)


def dfa_to_regex(dfa: Automaton, **limits) -> str:
    """Convert a DFA (or any automaton) to a regular expression."""
    return StateEliminator(**limits).convert(dfa)


def nfa_to_regex(nfa: Automaton, **limits) -> str:
    """Convert an NFA to a regular expression through an intermediate DFA."""
    return NFAToRegex(**limits).convert(nfa)


def validate_regex_syntax(regex: str, max_depth: int = DEFAULT_MAX_REGEX_DEPTH) -> Dict[str, object]:
    """
    Validate regex syntax without building the full NFA.

    Args:
        regex (str): The regular expression to validate
        max_depth (int): Ceiling on the nesting depth

    Returns:
        Dict with 'valid' (bool) and optional 'error' (str) and 'position' (int) keys

    Raises:
        AutomatonTooLargeError: If the regex nests deeper than ``max_depth``
    """
    try:
        RegexParser(regex, max_depth=max_depth).parse()
        return {'valid': True}
    except RegexSyntaxError as e:
        return {'valid': False, 'error': str(e), 'position': e.position}
