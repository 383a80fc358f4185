from dataclasses import dataclass

from django.conf import settings

DEFAULT_MAX_DFA_STATES = 512
DEFAULT_MAX_ELIMINATION_STATES = 256
DEFAULT_MAX_LABEL_SIZE = 20000
DEFAULT_MAX_REGEX_DEPTH = 100


@dataclass(frozen=True)
class ConversionLimits:
    """Ceilings applied to a single conversion request."""
    max_dfa_states: int = DEFAULT_MAX_DFA_STATES
    max_elimination_states: int = DEFAULT_MAX_ELIMINATION_STATES
    max_label_size: int = DEFAULT_MAX_LABEL_SIZE
    max_regex_depth: int = DEFAULT_MAX_REGEX_DEPTH


def get_conversion_limits() -> ConversionLimits:
    """
    Read the conversion ceilings from the Django settings.

    Settings are read on every call so that tests can override them.
    """
    return ConversionLimits(
        max_dfa_states=getattr(settings, 'CONVERTER_MAX_DFA_STATES', DEFAULT_MAX_DFA_STATES),
        max_elimination_states=getattr(settings, 'CONVERTER_MAX_ELIMINATION_STATES',
                                       DEFAULT_MAX_ELIMINATION_STATES),
        max_label_size=getattr(settings, 'CONVERTER_MAX_LABEL_SIZE', DEFAULT_MAX_LABEL_SIZE),
        max_regex_depth=getattr(settings, 'CONVERTER_MAX_REGEX_DEPTH', DEFAULT_MAX_REGEX_DEPTH),
    )
