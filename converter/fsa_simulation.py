from typing import Dict, List, Union, Tuple

from .automaton import Automaton
from .fsa_properties import is_deterministic
from .fsa_transformations import epsilon_closure


def simulate_deterministic_fsa(fsa: Automaton, input_string: str) -> Union[List[Tuple[str, str, str]], Dict]:
    """
    Simulates a deterministic automaton with the given input string.

    Args:
        fsa: A deterministic automaton; missing transitions reject
        input_string: The input string to simulate

    Returns:
        If the input is accepted, returns a list of transitions in the format:
        [(current_state, symbol, next_state), ...].
        If the input is rejected, returns a dictionary with:
        {
            'accepted': False,
            'path': [(current_state, symbol, next_state), ...],  # Path up to rejection
            'rejection_reason': str,  # Why rejected
            'rejection_position': int  # Position where rejection occurred
        }
    """
    if not is_deterministic(fsa):
        return {
            'accepted': False,
            'path': [],
            'rejection_reason': 'FSA must be deterministic',
            'rejection_position': 0
        }

    transition_map = fsa.transition_map()
    current_state = fsa.initial_state
    execution_path = []

    for position, symbol in enumerate(input_string):
        if symbol not in fsa.alphabet:
            return {
                'accepted': False,
                'path': execution_path,
                'rejection_reason': f"Symbol '{symbol}' not in alphabet",
                'rejection_position': position
            }

        next_states = transition_map.get(current_state, {}).get(symbol, [])
        if not next_states:
            return {
                'accepted': False,
                'path': execution_path,
                'rejection_reason': f"No transition defined for symbol '{symbol}' from state '{current_state}'",
                'rejection_position': position
            }

        next_state = next_states[0]
        execution_path.append((current_state, symbol, next_state))
        current_state = next_state

    if fsa.is_accepting(current_state):
        return execution_path

    return {
        'accepted': False,
        'path': execution_path,
        'rejection_reason': f"Final state '{current_state}' is not an accepting state",
        'rejection_position': len(input_string)
    }


def accepts(fsa: Automaton, input_string: str) -> bool:
    """
    Decide membership for any automaton, deterministic or not, by tracking
    the epsilon-closed set of current states.
    """
    transition_map = fsa.transition_map()
    current = epsilon_closure(fsa, {fsa.initial_state})

    for symbol in input_string:
        reached = set()
        for state in current:
            reached.update(transition_map.get(state, {}).get(symbol, []))
        if not reached:
            return False
        current = epsilon_closure(fsa, reached)

    return any(fsa.is_accepting(state) for state in current)
