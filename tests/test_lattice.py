import io
import unittest

from signet.api import Signet
from signet.errors import (
	ArityError, DuplicateTypeError, InvalidTypeNameError, InvalidPredicateError,
	UnknownTypeError, DuplicateOperatorError,
)
from signet.registry import parse_arity_declaration

class RegistryTests(unittest.TestCase):

	def setUp(self):
		self.signet = Signet()

	def test_star_is_always_there(self):
		assert self.signet.is_type("*")
		assert self.signet.is_type_of("*")("foo")

	def test_ad_hoc_predicate(self):
		def is5(value): return value == 5
		self.assertTrue(self.signet.is_type_of(is5)(5))
		self.assertFalse(self.signet.is_type_of(is5)(6))

	def test_registration_errors(self):
		with self.assertRaises(InvalidTypeNameError):
			self.signet.extend("bad name", lambda value: True)
		with self.assertRaises(InvalidTypeNameError):
			self.signet.extend("semi;colon", lambda value: True)
		with self.assertRaises(DuplicateTypeError):
			self.signet.extend("number", lambda value: True)
		with self.assertRaises(InvalidPredicateError):
			self.signet.extend("five", 5)
		with self.assertRaises(UnknownTypeError):
			self.signet.is_type_of("noSuchType")

	def test_new_types_and_subtypes(self):
		self.signet.extend("even", lambda value: isinstance(value, int) and value % 2 == 0)
		self.signet.subtype("even")("quadruple", lambda value: value % 4 == 0)
		self.assertTrue(self.signet.is_type_of("quadruple")(8))
		self.assertFalse(self.signet.is_type_of("quadruple")(6))
		self.assertFalse(self.signet.is_type_of("quadruple")("8"), "ancestor check comes first")

	def test_unknown_parent(self):
		with self.assertRaises(UnknownTypeError):
			self.signet.subtype("nothing")("something", lambda value: True)

	def test_subtypes_of_parametric_types(self):
		s = self.signet
		s.subtype("tuple")("pair", lambda value: len(value) == 2)
		self.assertTrue(s.is_type_of("pair<int; int>")([1, 2]))
		self.assertFalse(s.is_type_of("pair<int; int>")(["a", 2]))
		self.assertFalse(s.is_type_of("pair<int; int; int>")([1, 2, 3]))
		self.assertTrue(s.is_type_of("pair")([1, "a"]))
		self.assertFalse(s.is_type_of("pair")("ab"), "falls back to the nearest parent that needs no arguments")
		s.subtype("bounded")("evenBounded", lambda value: value % 2 == 0)
		check = s.is_type_of("evenBounded<int; 1; 10>")
		for value, expect in [(4, True), (5, False), (12, False), (4.0, False)]:
			with self.subTest(value=value):
				self.assertEqual(expect, check(value))

class ArityTests(unittest.TestCase):

	def setUp(self):
		self.signet = Signet()

	def test_declarations(self):
		self.assertEqual(("t", (0, None)), parse_arity_declaration("t"))
		self.assertEqual(("t", (1, 1)), parse_arity_declaration("t{1}"))
		self.assertEqual(("t", (1, None)), parse_arity_declaration("t{1,}"))
		self.assertEqual(("t", (2, 5)), parse_arity_declaration("t{2, 5}"))

	def test_arity_is_checked_up_front(self):
		s = self.signet
		s.extend("myTestType0", lambda value: True)
		s.extend("myTestType1{1}", lambda value: True)
		s.extend("myTestType1OrMore{1,}", lambda value: True)
		s.extend("myTestType2To5{2, 5}", lambda value: True)

		s.is_type_of("myTestType0<1, 2, 3>")
		s.is_type_of("myTestType1OrMore<1, 2, 3>")
		s.is_type_of("myTestType2To5<1, 2, 3>")

		cases = {
			"myTestType1<1, 2, 3>": "Type myTestType1 accepts, at most, 1 arguments",
			"myTestType1": "Type myTestType1 requires, at least, 1 arguments",
			"myTestType1OrMore": "Type myTestType1OrMore requires, at least, 1 arguments",
			"myTestType2To5": "Type myTestType2To5 requires, at least, 2 arguments",
			"myTestType2To5<1, 2, 3, 4, 5, 6>": "Type myTestType2To5 accepts, at most, 5 arguments",
		}
		for text, message in cases.items():
			with self.subTest(text=text):
				with self.assertRaises(ArityError) as context:
					s.is_type_of(text)
				self.assertEqual(message, str(context.exception))

	def test_backwards_declaration(self):
		with self.assertRaises(ArityError) as context:
			self.signet.extend("myTestTypeBroken{5, 1}", lambda value: True)
		self.assertEqual("Error in myTestTypeBroken arity declaration: min cannot be greater than max", str(context.exception))

class LatticeTests(unittest.TestCase):

	def setUp(self):
		self.signet = Signet()

	def test_type_chains(self):
		self.assertEqual("* -> object -> array", self.signet.type_chain("array"))
		self.assertEqual("* -> number", self.signet.type_chain("number"))
		self.assertEqual("* -> number -> finiteNumber -> finiteInt", self.signet.type_chain("finiteInt"))

	def test_subtype_relation(self):
		s = self.signet
		s.extend("c", lambda value: True)
		s.subtype("c")("b", lambda value: True)
		s.subtype("b")("a", lambda value: True)
		self.assertTrue(s.is_subtype_of("c")("a"))
		self.assertTrue(s.is_subtype_of("b")("a"))
		self.assertFalse(s.is_subtype_of("a")("c"))
		self.assertTrue(s.is_subtype_of("a")("a"))
		self.assertTrue(s.is_subtype_of("*")("a"))
		self.assertFalse(s.is_subtype_of("number")("a"))

	def test_predicates_are_deterministic(self):
		check = self.signet.is_type_of("unorderedProduct<number; int; string>")
		for value in [[1, 2.5, "x"], [2.5, 2.5, "x"], "nope"]:
			with self.subTest(value=value):
				self.assertEqual(check(value), check(value))

	def test_specificity(self):
		order = self.signet.sort_by_specificity(["number", "int", "object", "array", "string", "int"])
		self.assertEqual(6, len(order))
		self.assertEqual(2, order.count("int"))
		assert order.index("int") < order.index("number")
		assert order.index("array") < order.index("object")

	def test_alias(self):
		self.signet.alias("foo", "string")
		self.assertTrue(self.signet.is_type_of("foo")("bar"))
		self.assertFalse(self.signet.is_type_of("foo")(5))
		self.assertTrue(self.signet.is_subtype_of("string")("foo"))

	def test_partial_application(self):
		s = self.signet
		s.alias("testTuple", "tuple<_; _>")
		s.alias("testPartialTuple", "testTuple<int; _>")
		self.assertTrue(s.is_type_of("testTuple<array; object>")([[], {}]))
		self.assertTrue(s.is_type_of("testPartialTuple<string>")([5, "foo"]))
		self.assertFalse(s.is_type_of("testPartialTuple<string>")([5, 6]))
		with self.assertRaises(ArityError):
			s.is_type_of("testPartialTuple<string; int>")

	def test_which_type(self):
		which = self.signet.which_type(["int", "number", "string"])
		self.assertEqual("int", which(3))
		self.assertEqual("number", which(3.5))
		self.assertIsNone(which(None))

	def test_which_variant_type(self):
		get_value_type = self.signet.which_variant_type("variant<string; int>")
		self.assertEqual("string", get_value_type("foo"))
		self.assertEqual("int", get_value_type(17))
		self.assertIsNone(get_value_type(17.5))

class DependentOperatorTests(unittest.TestCase):

	def setUp(self):
		self.signet = Signet()

	def test_operators_are_inherited(self):
		self.assertIsNotNone(self.signet.get_dependent_operator_on("int")(">"))
		self.assertIsNotNone(self.signet.get_dependent_operator_on("tuple")("#="))
		self.assertIsNone(self.signet.get_dependent_operator_on("boolean")(">"))

	def test_define_operator(self):
		self.signet.define_dependent_operator_on("string")("startsWith", lambda a, b: a.startswith(b))
		enforced = self.signet.enforce("a startsWith b :: a:string, b:string => string", lambda a, b: a)
		self.assertEqual("foobar", enforced("foobar", "foo"))

	def test_duplicate_operator(self):
		with self.assertRaises(DuplicateOperatorError):
			self.signet.define_dependent_operator_on("number")(">", lambda a, b: True)

class ReportTests(unittest.TestCase):

	def test_quiet_by_default(self):
		stream = io.StringIO()
		Signet(stream=stream).extend("quiet", lambda value: True)
		self.assertEqual("", stream.getvalue())

	def test_verbose_definitions(self):
		stream = io.StringIO()
		signet = Signet(verbose=2, stream=stream)
		signet.subtype("int")("positiveInt", lambda value: value > 0)
		self.assertIn("* -> number -> int -> positiveInt", stream.getvalue())

if __name__ == '__main__':
	unittest.main()
