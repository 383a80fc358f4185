import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .automaton import Automaton
from .conf import get_conversion_limits
from .errors import AutomatonTooLargeError
from .fsa_properties import is_deterministic, has_epsilon_transitions
from .fsa_simulation import accepts
from .fsa_transformations import SubsetConstructor
from .pipelines import run_conversion, export_steps, EXAMPLES
from .regex_conversions import RegexToNFA, StateEliminator, validate_regex_syntax

logger = logging.getLogger(__name__)


def _statistics(fsa: Automaton) -> dict:
    return {
        'states_count': len(fsa.states),
        'alphabet_size': len(fsa.alphabet),
        'transitions_count': len(fsa.transitions),
        'accepting_states_count': len(fsa.accepting_states),
        'has_epsilon_transitions': has_epsilon_transitions(fsa),
        'is_deterministic': is_deterministic(fsa),
    }


def _too_large_response(e: AutomatonTooLargeError) -> JsonResponse:
    logger.warning("Conversion refused: %s", e)
    return JsonResponse({'error': str(e), 'error_type': 'too_large', 'limit': e.limit}, status=422)


def _parse_body(request) -> dict:
    """Raises ValueError unless the body is a JSON object."""
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _load_fsa(data: dict) -> Automaton:
    """Raises ValueError for a missing or invalid 'fsa' field."""
    fsa = data.get('fsa')
    if not fsa:
        raise ValueError('Missing FSA definition')
    return Automaton.from_dict(fsa)


@csrf_exempt
@require_POST
def regex_to_epsilon_nfa(request):
    """
    Django view to handle **regex → ε‑NFA** conversion requests.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to convert.

    Returns a JSON response with the generated NFA plus some useful
    statistics so the client can display summary information.
    """
    try:
        data = _parse_body(request)
        regex = data.get('regex')

        if regex is None:
            return JsonResponse({'error': 'Missing regex parameter'}, status=400)
        if not isinstance(regex, str):
            return JsonResponse({'error': 'regex must be a string'}, status=400)

        limits = get_conversion_limits()
        validation_result = validate_regex_syntax(regex, max_depth=limits.max_regex_depth)
        if not validation_result['valid']:
            logger.info("Rejected regex %r: %s", regex, validation_result['error'])
            return JsonResponse({
                'error': f'Invalid regex syntax: {validation_result["error"]}',
                'position': validation_result['position'],
            }, status=400)

        epsilon_nfa = RegexToNFA(max_depth=limits.max_regex_depth).convert(regex)

        return JsonResponse({
            'success': True,
            'regex': regex,
            'epsilon_nfa': epsilon_nfa.to_dict(),
            'statistics': _statistics(epsilon_nfa),
            'message': 'Regex converted to ε‑NFA successfully'
        })

    except AutomatonTooLargeError as e:
        return _too_large_response(e)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error converting regex to NFA")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def convert_nfa_to_dfa(request):
    """
    Django view to handle NFA to DFA conversion requests.

    Expects a POST request with a JSON body containing:
    - fsa: The automaton definition (can be deterministic or non-deterministic)

    Returns a JSON response with the converted DFA.
    """
    try:
        data = _parse_body(request)
        fsa = _load_fsa(data)
        limits = get_conversion_limits()

        converted_dfa = SubsetConstructor(max_states=limits.max_dfa_states).convert(fsa)

        original_stats = _statistics(fsa)
        if original_stats['is_deterministic']:
            message = 'Input was already a DFA, returned equivalent DFA'
        else:
            message = 'NFA successfully converted to DFA'

        return JsonResponse({
            'success': True,
            'original_fsa': fsa.to_dict(),
            'converted_dfa': converted_dfa.to_dict(),
            'statistics': {
                'original': original_stats,
                'converted': _statistics(converted_dfa),
            },
            'message': message
        })

    except AutomatonTooLargeError as e:
        return _too_large_response(e)
    except ValueError as e:
        logger.info("Rejected NFA to DFA request: %s", e)
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error converting NFA to DFA")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def convert_dfa_to_regex(request):
    """
    Django view to handle DFA to regex conversion requests by state elimination.

    Expects a POST request with a JSON body containing:
    - fsa: The automaton definition
    """
    try:
        data = _parse_body(request)
        fsa = _load_fsa(data)
        limits = get_conversion_limits()

        regex = StateEliminator(max_states=limits.max_elimination_states,
                                max_label_size=limits.max_label_size).convert(fsa)

        return JsonResponse({
            'success': True,
            'regex': regex,
            'message': f'The equivalent regular expression: {regex}'
        })

    except AutomatonTooLargeError as e:
        return _too_large_response(e)
    except ValueError as e:
        logger.info("Rejected DFA to regex request: %s", e)
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error converting DFA to regex")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def convert_nfa_to_regex(request):
    """
    Django view to handle NFA to regex conversion requests.

    The NFA is first determinised, and the intermediate DFA is returned
    alongside the regex.
    """
    try:
        data = _parse_body(request)
        fsa = _load_fsa(data)
        limits = get_conversion_limits()

        dfa = SubsetConstructor(max_states=limits.max_dfa_states).convert(fsa)
        regex = StateEliminator(max_states=limits.max_elimination_states,
                                max_label_size=limits.max_label_size).convert(dfa)

        return JsonResponse({
            'success': True,
            'regex': regex,
            'dfa': dfa.to_dict(),
            'message': f'The equivalent regular expression: {regex}'
        })

    except AutomatonTooLargeError as e:
        return _too_large_response(e)
    except ValueError as e:
        logger.info("Rejected NFA to regex request: %s", e)
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error converting NFA to regex")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def convert(request):
    """
    Django view running a whole conversion pipeline on raw user input.

    Expects a POST request with a JSON body containing:
    - type: One of 're-to-dfa', 'nfa-to-dfa', 'dfa-to-re', 'nfa-to-re'
    - input: The regex, or the automaton as JSON text

    Returns the conversion steps, and their pretty-printed JSON export.
    """
    try:
        data = _parse_body(request)
        conversion_type = data.get('type')

        if not conversion_type:
            return JsonResponse({'error': 'Missing conversion type'}, status=400)

        raw_input = data.get('input', '')
        if not isinstance(raw_input, str):
            return JsonResponse({'error': 'input must be a string'}, status=400)

        steps = run_conversion(conversion_type, raw_input, get_conversion_limits())

        return JsonResponse({
            'success': True,
            'type': conversion_type,
            'steps': [step.to_dict() for step in steps],
            'export': export_steps(steps)
        })

    except AutomatonTooLargeError as e:
        return _too_large_response(e)
    except ValueError as e:
        logger.info("Rejected conversion request: %s", e)
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error in conversion pipeline")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@require_GET
def conversion_examples(request):
    """Preset inputs for each conversion type, keyed by type."""
    return JsonResponse({
        'examples': {
            conversion_type: [{'name': name, 'value': value} for name, value in presets]
            for conversion_type, presets in EXAMPLES.items()
        }
    })


@csrf_exempt
@require_POST
def simulate(request):
    """
    Django view deciding whether an automaton accepts an input string.

    Expects a POST request with a JSON body containing:
    - fsa: The automaton definition
    - input: The input string to simulate
    """
    try:
        data = _parse_body(request)
        fsa = _load_fsa(data)
        input_string = data.get('input', '')

        if not isinstance(input_string, str):
            return JsonResponse({'error': 'input must be a string'}, status=400)

        return JsonResponse({
            'accepted': accepts(fsa, input_string),
            'deterministic': is_deterministic(fsa)
        })

    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error simulating automaton")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
