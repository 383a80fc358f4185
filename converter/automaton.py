import json
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .errors import AutomatonFormatError

EPSILON = 'ε'
EMPTY_LANGUAGE = '∅'

# Accepted on input as an alias for EPSILON
EPSILON_ALIASES = ('', EPSILON)


def fresh_name(base: str, taken) -> str:
    """Return ``base``, or ``base_1``, ``base_2``... if that name is already taken."""
    name = base
    counter = 1
    while name in taken:
        name = f"{base}_{counter}"
        counter += 1
    return name


@dataclass(frozen=True)
class State:
    """A state together with its derived initial/accepting flags."""
    id: str
    is_initial: bool
    is_accepting: bool

    def to_dict(self) -> Dict:
        return {'id': self.id, 'isInitial': self.is_initial, 'isAccepting': self.is_accepting}


@dataclass(frozen=True)
class Transition:
    """A labelled edge. The symbol is an alphabet member or EPSILON."""
    from_state: str
    to_state: str
    symbol: str

    @property
    def is_epsilon(self) -> bool:
        return self.symbol == EPSILON

    def to_dict(self) -> Dict:
        return {'from': self.from_state, 'to': self.to_state, 'symbol': self.symbol}


@dataclass(frozen=True)
class Automaton:
    """
    A finite automaton, deterministic or not.

    The initial and accepting states are held only in ``initial_state`` and
    ``accepting_states``; the per-state flags returned by ``state_records``
    are derived from them.

    Attributes:
        states: State ids, in creation order.
        transitions: Transitions, in creation order.
        alphabet: Input symbols, EPSILON excluded.
        initial_state: Id of the initial state.
        accepting_states: Ids of the accepting states, in state order.
    """
    states: Tuple[str, ...]
    transitions: Tuple[Transition, ...]
    alphabet: Tuple[str, ...]
    initial_state: str
    accepting_states: Tuple[str, ...]

    def is_accepting(self, state: str) -> bool:
        return state in self.accepting_states

    def state_records(self) -> List[State]:
        accepting = set(self.accepting_states)
        return [State(state, state == self.initial_state, state in accepting) for state in self.states]

    def transition_map(self) -> Dict[str, Dict[str, List[str]]]:
        """Index transitions as state -> symbol -> [targets]."""
        index = defaultdict(lambda: defaultdict(list))
        for transition in self.transitions:
            index[transition.from_state][transition.symbol].append(transition.to_state)
        return index

    def targets(self, state: str, symbol: str) -> List[str]:
        return [t.to_state for t in self.transitions if t.from_state == state and t.symbol == symbol]

    def to_dict(self) -> Dict:
        return {
            'states': [record.to_dict() for record in self.state_records()],
            'transitions': [transition.to_dict() for transition in self.transitions],
            'alphabet': list(self.alphabet),
            'initialState': self.initial_state,
            'acceptingStates': list(self.accepting_states),
        }

    def to_json(self, indent: int = 2) -> str:
        """Pretty-printed export form of ``to_dict``."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Automaton':
        """
        Build an automaton from its JSON-like form.

        States may be given as plain ids or as ``{id, isInitial, isAccepting}``
        objects. ``initialState`` and ``acceptingStates`` decide which states
        are initial and accepting; explicit flags must agree with them.

        Raises:
            AutomatonFormatError: If the definition is structurally invalid.
        """
        from .fsa_properties import validate_automaton_structure

        validation = validate_automaton_structure(data)
        if not validation['valid']:
            raise AutomatonFormatError(validation['error'])

        states = tuple(state if isinstance(state, str) else state['id'] for state in data['states'])

        transitions = []
        for entry in data['transitions']:
            symbol = EPSILON if entry['symbol'] in EPSILON_ALIASES else entry['symbol']
            transitions.append(Transition(entry['from'], entry['to'], symbol))

        accepting = set(data['acceptingStates'])
        return cls(
            states=states,
            transitions=tuple(transitions),
            alphabet=tuple(dict.fromkeys(data['alphabet'])),
            initial_state=data['initialState'],
            accepting_states=tuple(state for state in states if state in accepting),
        )

    @classmethod
    def from_json(cls, text: str) -> 'Automaton':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise AutomatonFormatError(f"Invalid JSON format: {e.msg} at line {e.lineno} column {e.colno}")
        return cls.from_dict(data)
