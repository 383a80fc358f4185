from typing import Dict
from collections import defaultdict

from .automaton import Automaton, EPSILON, EPSILON_ALIASES
from .regex_parser import is_literal_symbol


def has_epsilon_transitions(fsa: Automaton) -> bool:
    return any(transition.is_epsilon for transition in fsa.transitions)


def is_deterministic(fsa: Automaton) -> bool:
    """
    Checks if the automaton is deterministic.

    An automaton is deterministic if:
    1. It has no epsilon transitions
    2. For each state and each symbol, there is at most one transition

    Missing transitions are allowed (they reject implicitly).

    Args:
        fsa: The automaton to check

    Returns:
        bool: True if the automaton is deterministic, False otherwise
    """
    if has_epsilon_transitions(fsa):
        return False

    targets = defaultdict(set)
    for transition in fsa.transitions:
        targets[(transition.from_state, transition.symbol)].add(transition.to_state)

    return all(len(destinations) <= 1 for destinations in targets.values())


def _state_id(entry) -> str:
    return entry if isinstance(entry, str) else entry['id']


def validate_automaton_structure(data: Dict) -> Dict:
    """
    Validates the JSON-like form of an automaton before conversion.

    Alphabet symbols are restricted to single ASCII letters and digits, the
    literals the regex syntax accepts.

    Args:
        data: The automaton definition, usually freshly decoded JSON

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(data, dict):
        return {'valid': False, 'error': 'Automaton definition must be a JSON object'}

    if not isinstance(data.get('states'), list):
        return {'valid': False,
                'error': "Missing or invalid 'states' field. Expected an array of state objects."}

    if not isinstance(data.get('transitions'), list):
        return {'valid': False,
                'error': "Missing or invalid 'transitions' field. Expected an array of transition objects."}

    if not isinstance(data.get('alphabet'), list):
        return {'valid': False, 'error': "Missing or invalid 'alphabet' field. Expected an array of symbols."}

    if not data.get('initialState') or not isinstance(data['initialState'], str):
        return {'valid': False, 'error': "Missing 'initialState' field."}

    if not isinstance(data.get('acceptingStates'), list):
        return {'valid': False,
                'error': "Missing or invalid 'acceptingStates' field. Expected an array of state IDs."}

    # States may be plain ids or objects with an 'id' property
    for state in data['states']:
        if isinstance(state, str) and state:
            continue
        if isinstance(state, dict) and isinstance(state.get('id'), str) and state['id']:
            continue
        return {'valid': False,
                'error': "Invalid state format. States should be objects with 'id' property or strings."}

    state_ids = set()
    for state in data['states']:
        state_id = _state_id(state)
        if state_id in state_ids:
            return {'valid': False, 'error': f"Duplicate state id '{state_id}'"}
        state_ids.add(state_id)

    for symbol in data['alphabet']:
        if not isinstance(symbol, str) or not symbol:
            return {'valid': False, 'error': 'Alphabet symbols must be non-empty strings'}
        if symbol == EPSILON:
            return {'valid': False, 'error': f"Alphabet must not contain the epsilon symbol '{EPSILON}'"}
        # Symbols must also be regex literals, so that a converted regex reads back
        if len(symbol) != 1 or not is_literal_symbol(symbol):
            return {'valid': False,
                    'error': f"Alphabet symbol '{symbol}' is not supported. "
                             "Symbols must be single letters or digits."}

    if data['initialState'] not in state_ids:
        return {'valid': False, 'error': f"Initial state '{data['initialState']}' not in states list"}

    for state in data['acceptingStates']:
        if not isinstance(state, str) or state not in state_ids:
            return {'valid': False, 'error': f'Accepting state {state} not in states list'}

    alphabet = set(data['alphabet'])
    for transition in data['transitions']:
        if (not isinstance(transition, dict)
                or not all(isinstance(transition.get(key), str) for key in ('from', 'to', 'symbol'))
                or not transition['from'] or not transition['to']):
            return {'valid': False,
                    'error': "Invalid transition format. Each transition must have 'from', 'to', "
                             "and 'symbol' properties."}

        for endpoint in (transition['from'], transition['to']):
            if endpoint not in state_ids:
                return {'valid': False, 'error': f"Transition references unknown state '{endpoint}'"}

        symbol = transition['symbol']
        if symbol not in EPSILON_ALIASES and symbol not in alphabet:
            return {'valid': False, 'error': f"Transition symbol '{symbol}' is not in the alphabet"}

    # Explicit flags are optional but must agree with initialState/acceptingStates
    accepting = set(data['acceptingStates'])
    for state in data['states']:
        if not isinstance(state, dict):
            continue

        if 'isInitial' in state:
            if not isinstance(state['isInitial'], bool):
                return {'valid': False, 'error': f"State '{state['id']}' has a non-boolean isInitial flag"}
            if state['isInitial'] != (state['id'] == data['initialState']):
                return {'valid': False,
                        'error': f"State '{state['id']}' isInitial flag conflicts with "
                                 f"initialState '{data['initialState']}'"}

        if 'isAccepting' in state:
            if not isinstance(state['isAccepting'], bool):
                return {'valid': False, 'error': f"State '{state['id']}' has a non-boolean isAccepting flag"}
            if state['isAccepting'] != (state['id'] in accepting):
                return {'valid': False,
                        'error': f"State '{state['id']}' isAccepting flag conflicts with acceptingStates"}

    return {'valid': True}
