import logging
from typing import Dict, FrozenSet, Iterable, List, Set
from collections import deque

from .automaton import Automaton, Transition, EPSILON, fresh_name
from .conf import DEFAULT_MAX_DFA_STATES
from .errors import AutomatonTooLargeError

logger = logging.getLogger(__name__)


def _closure(transition_map: Dict, states: Iterable[str]) -> FrozenSet[str]:
    closure = set(states)
    stack = list(closure)

    while stack:
        state = stack.pop()
        for epsilon_target in transition_map.get(state, {}).get(EPSILON, []):
            if epsilon_target not in closure:
                closure.add(epsilon_target)
                stack.append(epsilon_target)

    return frozenset(closure)


def _move(transition_map: Dict, states: Iterable[str], symbol: str) -> FrozenSet[str]:
    result = set()
    for state in states:
        result.update(transition_map.get(state, {}).get(symbol, []))
    return frozenset(result)


def epsilon_closure(nfa: Automaton, states: Iterable[str]) -> FrozenSet[str]:
    """
    Compute the set of states reachable from ``states`` using only epsilon
    transitions, including the given states themselves.

    Uses an explicit stack, so there is no recursion limit on long epsilon
    chains and epsilon cycles terminate.
    """
    return _closure(nfa.transition_map(), states)


def move(nfa: Automaton, states: Iterable[str], symbol: str) -> FrozenSet[str]:
    """Compute all states reachable from given states on given symbol"""
    return _move(nfa.transition_map(), states, symbol)


def composite_id(states: Iterable[str]) -> str:
    """Canonical name of a DFA state built from a set of NFA states, e.g. ``{q0,q1}``."""
    return '{' + ','.join(sorted(states)) + '}'


class SubsetConstructor:
    """
    Converts an NFA to an equivalent DFA using the subset construction.

    Each DFA state stands for the epsilon closure of a set of NFA states and
    is named by its composite id, suffixed with _1, _2... if another set
    already took that name. Symbols that lead nowhere get no transition, so
    the result may be partial; no dead state is added.
    """

    def __init__(self, max_states: int = DEFAULT_MAX_DFA_STATES):
        self.max_states = max_states

    def convert(self, nfa: Automaton) -> Automaton:
        # Memorisation cache for epsilon closures, keyed by the moved set
        transition_map = nfa.transition_map()
        closure_cache: Dict[FrozenSet[str], FrozenSet[str]] = {}

        def closure_of(states: FrozenSet[str]) -> FrozenSet[str]:
            if states not in closure_cache:
                closure_cache[states] = _closure(transition_map, states)
            return closure_cache[states]

        nfa_accepting = frozenset(nfa.accepting_states)

        start_closure = closure_of(frozenset({nfa.initial_state}))
        dfa_state_map: Dict[FrozenSet[str], str] = {start_closure: composite_id(start_closure)}
        dfa_names = set(dfa_state_map.values())
        dfa_transitions: List[Transition] = []

        queue = deque([start_closure])
        processed_states: Set[FrozenSet[str]] = set()

        while queue:
            current_nfa_states = queue.popleft()
            if current_nfa_states in processed_states:
                continue
            processed_states.add(current_nfa_states)
            current_dfa_state = dfa_state_map[current_nfa_states]

            for symbol in nfa.alphabet:
                moved_states = _move(transition_map, current_nfa_states, symbol)
                if not moved_states:
                    continue

                new_state_set = closure_of(moved_states)
                if new_state_set not in dfa_state_map:
                    if len(dfa_state_map) >= self.max_states:
                        raise AutomatonTooLargeError(
                            f"Subset construction exceeded {self.max_states} DFA states; "
                            f"the automaton is too large to convert", self.max_states)
                    # State ids may contain commas, so different sets can share a composite id
                    name = fresh_name(composite_id(new_state_set), dfa_names)
                    dfa_names.add(name)
                    dfa_state_map[new_state_set] = name
                    queue.append(new_state_set)

                dfa_transitions.append(Transition(current_dfa_state, dfa_state_map[new_state_set], symbol))

        # Dict preserves discovery order
        dfa_states = tuple(dfa_state_map.values())
        dfa_accepting = tuple(name for state_set, name in dfa_state_map.items() if state_set & nfa_accepting)

        logger.debug("Subset construction: %d NFA states -> %d DFA states",
                     len(nfa.states), len(dfa_states))

        return Automaton(
            states=dfa_states,
            transitions=tuple(dfa_transitions),
            alphabet=nfa.alphabet,
            initial_state=dfa_state_map[start_closure],
            accepting_states=dfa_accepting,
        )


def nfa_to_dfa(nfa: Automaton, max_states: int = DEFAULT_MAX_DFA_STATES) -> Automaton:
    """
    Converts a non-deterministic finite automaton (NFA) to a deterministic finite automaton (DFA)
    using subset construction algorithm.

    Args:
        nfa (Automaton): The NFA, possibly with epsilon transitions
        max_states (int): Ceiling on the number of DFA states

    Returns:
        Automaton: A DFA where each state represents a subset of NFA states

    Raises:
        AutomatonTooLargeError: If more than ``max_states`` DFA states would be created
    """
    return SubsetConstructor(max_states=max_states).convert(nfa)
