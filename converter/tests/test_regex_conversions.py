from django.test import SimpleTestCase
from converter.automaton import Transition, EPSILON
from converter.errors import AutomatonTooLargeError, RegexSyntaxError
from converter.fsa_simulation import accepts
from converter.regex_conversions import (
    regex_to_epsilon_nfa,
    validate_regex_syntax,
    NFABuilder,
    RegexToNFA,
)
from converter.regex_parser import Literal, Star


class TestRegexConversions(SimpleTestCase):

    def test_regex_to_epsilon_nfa_basic_characters(self):
        """Test conversion of basic character regexes to epsilon-NFA"""
        # Single character 'a'
        nfa = regex_to_epsilon_nfa('a')
        self.assertEqual(nfa.states, ('q0', 'q1'))
        self.assertEqual(nfa.alphabet, ('a',))
        self.assertEqual(nfa.initial_state, 'q0')
        self.assertEqual(nfa.accepting_states, ('q1',))
        self.assertEqual(nfa.transitions, (Transition('q0', 'q1', 'a'),))

        # Digit '0'
        nfa = regex_to_epsilon_nfa('0')
        self.assertEqual(nfa.alphabet, ('0',))
        self.assertEqual(nfa.targets('q0', '0'), ['q1'])

    def test_regex_to_epsilon_nfa_epsilon(self):
        """Test epsilon regex conversion"""
        for regex in ['ε', '', '()']:
            nfa = regex_to_epsilon_nfa(regex)
            self.assertEqual(nfa.states, ('q0', 'q1'))
            self.assertEqual(nfa.alphabet, ())
            self.assertEqual(nfa.transitions, (Transition('q0', 'q1', EPSILON),))
            self.assertTrue(accepts(nfa, ''))

    def test_regex_to_epsilon_nfa_empty_set(self):
        nfa = regex_to_epsilon_nfa('∅')
        self.assertEqual(len(nfa.states), 2)
        self.assertEqual(nfa.transitions, ())
        self.assertFalse(accepts(nfa, ''))

    def test_regex_to_epsilon_nfa_concatenation(self):
        nfa = regex_to_epsilon_nfa('ab')
        self.assertEqual(nfa.states, ('q0', 'q1', 'q2', 'q3'))
        self.assertEqual(nfa.initial_state, 'q0')
        self.assertEqual(nfa.accepting_states, ('q3',))
        self.assertEqual(nfa.transitions, (
            Transition('q0', 'q1', 'a'),
            Transition('q2', 'q3', 'b'),
            Transition('q1', 'q2', EPSILON),
        ))

    def test_regex_to_epsilon_nfa_union(self):
        """The union start and end states are allocated before the branches"""
        nfa = regex_to_epsilon_nfa('a|b')
        self.assertEqual(len(nfa.states), 6)
        self.assertEqual(nfa.initial_state, 'q0')
        self.assertEqual(nfa.accepting_states, ('q1',))
        self.assertEqual(sorted(nfa.targets('q0', EPSILON)), ['q2', 'q4'])
        self.assertEqual(nfa.targets('q3', EPSILON), ['q1'])
        self.assertEqual(nfa.targets('q5', EPSILON), ['q1'])

    def test_regex_to_epsilon_nfa_star(self):
        """The star start and end states are allocated after the inner fragment"""
        nfa = regex_to_epsilon_nfa('a*')
        self.assertEqual(nfa.states, ('q0', 'q1', 'q2', 'q3'))
        self.assertEqual(nfa.initial_state, 'q2')
        self.assertEqual(nfa.accepting_states, ('q3',))
        self.assertEqual(sorted(nfa.targets('q2', EPSILON)), ['q0', 'q3'])
        self.assertEqual(sorted(nfa.targets('q1', EPSILON)), ['q0', 'q3'])

    def test_single_accepting_state(self):
        for regex in ['a', 'a|b', '(a|b)*abb', 'a(b|c)*d', '']:
            nfa = regex_to_epsilon_nfa(regex)
            self.assertEqual(len(nfa.accepting_states), 1)
            self.assertIn(nfa.initial_state, nfa.states)

    def test_alphabet_is_sorted_and_deduplicated(self):
        nfa = regex_to_epsilon_nfa('(b|a)*ba')
        self.assertEqual(nfa.alphabet, ('a', 'b'))

    def test_state_numbering_restarts_per_conversion(self):
        first = regex_to_epsilon_nfa('(a|b)*')
        second = regex_to_epsilon_nfa('(a|b)*')
        self.assertEqual(first, second)
        self.assertEqual(second.states[0], 'q0')

        converter = RegexToNFA()
        self.assertEqual(converter.convert('ab'), converter.convert('ab'))

    def test_language_of_thompson_nfa(self):
        """Test that the NFA accepts exactly the strings the regex describes"""
        nfa = regex_to_epsilon_nfa('(a|b)*abb')
        for word in ['abb', 'aabb', 'babb', 'abababb']:
            self.assertTrue(accepts(nfa, word), word)
        for word in ['', 'ab', 'abba', 'bbb', 'abbc']:
            self.assertFalse(accepts(nfa, word), word)

        nfa = regex_to_epsilon_nfa('a|')
        self.assertTrue(accepts(nfa, ''))
        self.assertTrue(accepts(nfa, 'a'))
        self.assertFalse(accepts(nfa, 'aa'))

    def test_invalid_patterns_raise(self):
        for regex in ['(a', 'a)', '*', 'a+b', 'a b', 'a.b']:
            with self.assertRaises(RegexSyntaxError, msg=regex):
                regex_to_epsilon_nfa(regex)

    def test_nesting_limit(self):
        with self.assertRaises(AutomatonTooLargeError):
            regex_to_epsilon_nfa('a' + '*' * 1200)
        with self.assertRaises(AutomatonTooLargeError):
            RegexToNFA(max_depth=2).convert('a**')
        self.assertEqual(len(RegexToNFA(max_depth=3).convert('a**').states), 6)
        self.assertEqual(len(regex_to_epsilon_nfa('a**', max_depth=3).states), 6)

    def test_builder_fragments(self):
        builder = NFABuilder()
        fragment = builder.build(Star(Literal('x')))
        self.assertEqual((fragment.start, fragment.end), ('q2', 'q3'))
        self.assertEqual(builder.state_counter, 4)
        self.assertEqual(len(builder.transitions), 5)


class TestValidateRegexSyntax(SimpleTestCase):

    def test_valid_patterns(self):
        for regex in ['a', '', '()', 'a|', '(a|b)*abb', 'ε', '∅', 'a**']:
            self.assertEqual(validate_regex_syntax(regex), {'valid': True}, regex)

    def test_invalid_patterns_report_position(self):
        result = validate_regex_syntax('(ab')
        self.assertFalse(result['valid'])
        self.assertEqual(result['position'], 0)
        self.assertIn('never closed', result['error'])

        result = validate_regex_syntax('ab+')
        self.assertFalse(result['valid'])
        self.assertEqual(result['position'], 2)
        self.assertIn("Unsupported operator '+'", result['error'])

    def test_too_deep_is_not_a_syntax_error(self):
        """Nesting beyond the limit raises instead of reporting invalid syntax"""
        with self.assertRaises(AutomatonTooLargeError):
            validate_regex_syntax('(' * 300 + 'a' + ')' * 300)
        self.assertEqual(validate_regex_syntax('((a))', max_depth=2), {'valid': True})
        with self.assertRaises(AutomatonTooLargeError):
            validate_regex_syntax('((a))', max_depth=1)
