from django.test import SimpleTestCase
from converter.errors import AutomatonTooLargeError, RegexSyntaxError
from converter.regex_parser import (
    RegexParser, parse_regex, tokenize, nesting_depth,
    Literal, Epsilon, EmptySet, Concat, Union, Star,
    concat, union, star,
    LITERAL, UNION_OP, STAR_OP, LPAREN, RPAREN,
)

a, b, c, d = Literal('a'), Literal('b'), Literal('c'), Literal('d')


class TestTokenizer(SimpleTestCase):

    def test_tokens_and_positions(self):
        tokens = tokenize('(a|b)*')
        self.assertEqual([token.kind for token in tokens], [LPAREN, LITERAL, UNION_OP, LITERAL, RPAREN, STAR_OP])
        self.assertEqual([token.position for token in tokens], [0, 1, 2, 3, 4, 5])

    def test_invalid_character(self):
        with self.assertRaisesMessage(RegexSyntaxError, "Invalid character '-' at position 1"):
            tokenize('a-b')

    def test_unsupported_operators(self):
        """Plus, optional and character classes are outside the supported syntax"""
        for regex, char in [('a+', '+'), ('a?', '?'), ('[ab]', '['), ('a.b', '.')]:
            with self.assertRaises(RegexSyntaxError) as ctx:
                tokenize(regex)
            self.assertIn(f"Unsupported operator '{char}'", str(ctx.exception))

    def test_whitespace_is_rejected(self):
        with self.assertRaises(RegexSyntaxError) as ctx:
            tokenize('a b')
        self.assertEqual(ctx.exception.position, 1)


class TestRegexParser(SimpleTestCase):

    def test_single_literal(self):
        self.assertEqual(parse_regex('a'), a)

    def test_empty_regex_is_epsilon(self):
        self.assertEqual(parse_regex(''), Epsilon())
        self.assertEqual(parse_regex('()'), Epsilon())
        self.assertEqual(parse_regex('ε'), Epsilon())

    def test_empty_set_atom(self):
        self.assertEqual(parse_regex('∅'), EmptySet())

    def test_precedence(self):
        """Star binds tighter than concatenation, which binds tighter than union"""
        self.assertEqual(parse_regex('ab*|c'), Union((Concat((a, Star(b))), c)))
        self.assertEqual(parse_regex('(ab)*'), Star(Concat((a, b))))

    def test_union_is_flat(self):
        self.assertEqual(parse_regex('a|b|c'), Union((a, b, c)))

    def test_union_inside_group_is_not_split(self):
        """A '|' inside parentheses belongs to the group, not the outer union"""
        self.assertEqual(parse_regex('a(b|c)d'), Concat((a, Union((b, c)), d)))
        self.assertEqual(parse_regex('(a|(b|c)d)*'), Star(Union((a, Concat((Union((b, c)), d))))))

    def test_empty_branches(self):
        self.assertEqual(parse_regex('a|'), Union((a, Epsilon())))
        self.assertEqual(parse_regex('|a'), Union((Epsilon(), a)))

    def test_repeated_star(self):
        self.assertEqual(parse_regex('a**'), Star(Star(a)))

    def test_unbalanced_parentheses(self):
        with self.assertRaisesMessage(RegexSyntaxError, "'(' at position 0 is never closed"):
            parse_regex('(ab')
        with self.assertRaisesMessage(RegexSyntaxError, "unexpected ')' at position 2"):
            parse_regex('ab)')
        with self.assertRaises(RegexSyntaxError):
            parse_regex('((a|b)')

    def test_star_without_operand(self):
        for regex in ['*', '*a', 'a|*', '(*a)']:
            with self.assertRaises(RegexSyntaxError, msg=regex):
                parse_regex(regex)

    def test_error_position(self):
        with self.assertRaises(RegexSyntaxError) as ctx:
            RegexParser('ab|*').parse()
        self.assertEqual(ctx.exception.position, 3)


class TestRegexNodes(SimpleTestCase):

    def test_to_string_parenthesises_by_precedence(self):
        self.assertEqual(Concat((a, Union((b, c)))).to_string(), 'a(b|c)')
        self.assertEqual(Star(Concat((a, b))).to_string(), '(ab)*')
        self.assertEqual(Star(Union((a, b))).to_string(), '(a|b)*')
        self.assertEqual(Union((Concat((a, b)), c)).to_string(), 'ab|c')
        self.assertEqual(Union((Epsilon(), a)).to_string(), 'ε|a')
        self.assertEqual(Star(Literal('ab')).to_string(), '(ab)*')

    def test_to_string_reparses_to_same_tree(self):
        for regex in ['a(b|c)*d', 'ab|c', '(a|b)*abb', 'ε|a(ba)*b']:
            self.assertEqual(parse_regex(regex).to_string(), regex)

    def test_size_counts_leaves(self):
        self.assertEqual(parse_regex('(a|b)*abb').size(), 5)

    def test_concat_identities(self):
        self.assertEqual(concat(Epsilon(), a, Epsilon()), a)
        self.assertEqual(concat(a, EmptySet()), EmptySet())
        self.assertEqual(concat(), Epsilon())
        self.assertEqual(concat(Concat((a, b)), c), Concat((a, b, c)))

    def test_union_identities(self):
        self.assertEqual(union(EmptySet(), a), a)
        self.assertEqual(union(a, a), a)
        self.assertEqual(union(Union((a, b)), b, c), Union((a, b, c)))
        self.assertEqual(union(), EmptySet())

    def test_star_identities(self):
        self.assertEqual(star(Epsilon()), Epsilon())
        self.assertEqual(star(EmptySet()), Epsilon())
        self.assertEqual(star(Star(a)), Star(a))
        self.assertEqual(star(a), Star(a))


class TestNestingLimit(SimpleTestCase):
    """Deep input fails fast instead of exhausting the interpreter stack"""

    def test_nesting_depth(self):
        self.assertEqual(nesting_depth(a), 1)
        self.assertEqual(nesting_depth(parse_regex('a(b|c)*')), 4)
        self.assertEqual(nesting_depth(parse_regex('a***')), 4)

    def test_long_star_chain(self):
        with self.assertRaises(AutomatonTooLargeError) as ctx:
            parse_regex('a' + '*' * 1200)
        self.assertEqual(ctx.exception.limit, 100)
        self.assertIn('too large', str(ctx.exception))

    def test_deep_groups(self):
        with self.assertRaises(AutomatonTooLargeError):
            parse_regex('(' * 300 + 'a' + ')' * 300)
        self.assertEqual(parse_regex('(' * 100 + 'a' + ')' * 100), a)

    def test_configurable_depth(self):
        with self.assertRaises(AutomatonTooLargeError) as ctx:
            parse_regex('((a*)*)*', max_depth=3)
        self.assertEqual(ctx.exception.limit, 3)
        self.assertEqual(parse_regex('((a*)*)*', max_depth=4), Star(Star(Star(a))))
        with self.assertRaises(AutomatonTooLargeError):
            RegexParser('((a))', max_depth=1).parse()
