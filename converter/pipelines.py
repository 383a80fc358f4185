"""
Multi-step conversions as offered by the conversion tool.

Each pipeline takes the raw text the user entered, and returns the ordered
steps of the conversion so a client can walk through them or export them.
"""
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .automaton import Automaton
from .conf import ConversionLimits
from .errors import AutomatonFormatError, ConversionError
from .fsa_transformations import SubsetConstructor
from .regex_conversions import RegexToNFA, StateEliminator, NFAToRegex

logger = logging.getLogger(__name__)

RE_TO_DFA = 're-to-dfa'
NFA_TO_DFA = 'nfa-to-dfa'
DFA_TO_RE = 'dfa-to-re'
NFA_TO_RE = 'nfa-to-re'
CONVERSION_TYPES = (RE_TO_DFA, NFA_TO_DFA, DFA_TO_RE, NFA_TO_RE)

INVALID_JSON_MESSAGE = (
    "Invalid JSON format. Please check your input syntax. Make sure to use proper JSON "
    "with double quotes around property names and string values."
)


def _automaton_example(states, transitions, accepting) -> str:
    """JSON text for a preset automaton; the first state is initial."""
    return json.dumps({
        'states': [{'id': state, 'isInitial': state == states[0], 'isAccepting': state in accepting}
                   for state in states],
        'transitions': [{'from': source, 'to': target, 'symbol': symbol}
                        for source, symbol, target in transitions],
        'alphabet': ['a', 'b'],
        'initialState': states[0],
        'acceptingStates': list(accepting),
    }, indent=2, ensure_ascii=False)


# Preset inputs per conversion type, as (name, input text)
EXAMPLES = {
    RE_TO_DFA: [
        ("Simple: a*b", "a*b"),
        ("Medium: (a|b)*abb", "(a|b)*abb"),
        ("Complex: (a|b)*a(a|b)(a|b)", "(a|b)*a(a|b)(a|b)"),
    ],
    NFA_TO_DFA: [
        ("Simple: 2-state NFA", _automaton_example(
            ['q0', 'q1'],
            [('q0', 'a', 'q0'), ('q0', 'a', 'q1'), ('q0', 'b', 'q0'), ('q1', 'b', 'q1')],
            ['q1'])),
        ("Medium: 3-state NFA with ε-transitions", _automaton_example(
            ['q0', 'q1', 'q2'],
            [('q0', 'ε', 'q1'), ('q1', 'a', 'q2'), ('q2', 'b', 'q1'), ('q0', 'a', 'q2')],
            ['q2'])),
    ],
    DFA_TO_RE: [
        ("Simple: 2-state DFA", _automaton_example(
            ['q0', 'q1'],
            [('q0', 'a', 'q1'), ('q1', 'b', 'q0'), ('q0', 'b', 'q0'), ('q1', 'a', 'q1')],
            ['q1'])),
        ("Medium: 3-state DFA", _automaton_example(
            ['q0', 'q1', 'q2'],
            [('q0', 'a', 'q1'), ('q0', 'b', 'q0'), ('q1', 'b', 'q2'),
             ('q1', 'a', 'q0'), ('q2', 'a', 'q2'), ('q2', 'b', 'q2')],
            ['q2'])),
    ],
    NFA_TO_RE: [
        ("Simple: 2-state NFA", _automaton_example(
            ['q0', 'q1'],
            [('q0', 'a', 'q1'), ('q0', 'b', 'q0'), ('q1', 'a', 'q1'), ('q1', 'b', 'q1')],
            ['q1'])),
    ],
}


@dataclass(frozen=True)
class ConversionStep:
    description: str
    data: Dict
    explanation: str

    def to_dict(self) -> Dict:
        return {'description': self.description, 'data': self.data, 'explanation': self.explanation}


def _regex_data(regex: str) -> Dict:
    return {'regex': regex, 'type': 'regex'}


def _parse_automaton(text: str, kind: str) -> Automaton:
    if not text:
        article = 'an' if kind == 'NFA' else 'a'
        raise ConversionError(f"Please enter {article} {kind} definition")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        raise AutomatonFormatError(INVALID_JSON_MESSAGE)
    return Automaton.from_dict(data)


def run_conversion(conversion_type: str, raw_input: str,
                   limits: Optional[ConversionLimits] = None) -> List[ConversionStep]:
    """
    Run one of the conversion pipelines on user input.

    Args:
        conversion_type: One of CONVERSION_TYPES
        raw_input: A regex for 're-to-dfa', otherwise an automaton as JSON text
        limits: Ceilings for the conversion; defaults apply when omitted

    Returns:
        List[ConversionStep]: The steps, input first

    Raises:
        ConversionError: For an unknown type, empty input, or any invalid input
    """
    limits = limits or ConversionLimits()
    text = (raw_input or '').strip()

    if conversion_type == RE_TO_DFA:
        if not text:
            raise ConversionError("Please enter a regular expression")
        nfa = RegexToNFA(max_depth=limits.max_regex_depth).convert(text)
        dfa = SubsetConstructor(max_states=limits.max_dfa_states).convert(nfa)
        steps = [
            ConversionStep("Regular Expression to NFA", nfa.to_dict(),
                           "Using Thompson's construction to convert the regular expression to an NFA."),
            ConversionStep("NFA to DFA", dfa.to_dict(),
                           "Using subset construction to convert the NFA to a DFA."),
        ]

    elif conversion_type == NFA_TO_DFA:
        nfa = _parse_automaton(text, 'NFA')
        dfa = SubsetConstructor(max_states=limits.max_dfa_states).convert(nfa)
        steps = [
            ConversionStep("Initial NFA", nfa.to_dict(), "The input nondeterministic finite automaton."),
            ConversionStep("Converted DFA", dfa.to_dict(),
                           "The equivalent deterministic finite automaton using subset construction."),
        ]

    elif conversion_type == DFA_TO_RE:
        dfa = _parse_automaton(text, 'DFA')
        regex = StateEliminator(max_states=limits.max_elimination_states,
                                max_label_size=limits.max_label_size).convert(dfa)
        steps = [
            ConversionStep("Initial DFA", dfa.to_dict(), "The input deterministic finite automaton."),
            ConversionStep("Regular Expression", _regex_data(regex),
                           f"The equivalent regular expression: {regex}"),
        ]

    elif conversion_type == NFA_TO_RE:
        nfa = _parse_automaton(text, 'NFA')
        regex = NFAToRegex(max_dfa_states=limits.max_dfa_states,
                           max_elimination_states=limits.max_elimination_states,
                           max_label_size=limits.max_label_size).convert(nfa)
        steps = [
            ConversionStep("Initial NFA", nfa.to_dict(), "The input nondeterministic finite automaton."),
            ConversionStep("Regular Expression", _regex_data(regex),
                           f"The equivalent regular expression: {regex}"),
        ]

    else:
        raise ConversionError(
            f"Unknown conversion type '{conversion_type}'. Expected one of: {', '.join(CONVERSION_TYPES)}")

    logger.debug("Conversion %s finished with %d steps", conversion_type, len(steps))
    return steps


def export_steps(steps: List[ConversionStep]) -> str:
    """Pretty-printed JSON export of the conversion steps."""
    return json.dumps([step.to_dict() for step in steps], indent=2, ensure_ascii=False)
