import unittest

from signet.assembler import assemble_type, assemble_signature
from signet.errors import ParseError, MacroError
from signet.macros import MacroEngine, install_standard_macros, parenthesized_signature_to_function
from signet.parser import Parser, scan, split, OPEN, CLOSE, TEXT, ARROW
from signet.syntax import TypeRecord, DependentClause

def _parser():
	macros = MacroEngine()
	install_standard_macros(macros)
	return Parser(macros)

class ScannerTests(unittest.TestCase):

	def test_attached_angle_opens_arguments(self):
		roles = [cell.role for cell in scan("array<int>")]
		self.assertEqual(OPEN, roles[5])
		self.assertEqual(CLOSE, roles[-1])

	def test_free_standing_angles_are_operators(self):
		for text in ["A < B", "A > B", "A <= B", "A <: B"]:
			with self.subTest(text=text):
				assert all(cell.role == TEXT for cell in scan(text))

	def test_arrow_is_never_a_bracket(self):
		cells = scan("function<* => *>")
		self.assertEqual([ARROW, ARROW], [cell.role for cell in cells if cell.char in "=>" and cell.depth == 1])
		self.assertEqual(CLOSE, cells[-1].role)

	def test_unbalanced(self):
		with self.assertRaises(ParseError):
			scan("array<tuple<int>")

	def test_split_respects_depth_and_escapes(self):
		pieces = [piece for piece, offset in split("a, b<c, d>, e%,f", ",")]
		self.assertEqual(["a", " b<c, d>", " e%,f"], pieces)
		pieces = [piece for piece, offset in split("a, b<c, d>, e%,f", ",", keep_escapes=False)]
		self.assertEqual(["a", " b<c, d>", " e,f"], pieces)

class ParseTypeTests(unittest.TestCase):

	def setUp(self):
		self.parser = _parser()

	def test_plain(self):
		self.assertEqual(TypeRecord(None, "int", (), False), self.parser.parse_type("int"))

	def test_named_optional_with_arguments(self):
		record = self.parser.parse_type("low:[bounded<int, 1, 5>]")
		self.assertEqual(TypeRecord("low", "bounded", ("int", "1", "5"), True), record)

	def test_name_inside_or_outside_the_brackets(self):
		expect = TypeRecord("b", "int", (), True)
		for text in ["b:[int]", "[b:int]", " [ b : int ] "]:
			with self.subTest(text=text):
				self.assertEqual(expect, self.parser.parse_type(text))
		record = self.parser.parse_type("[low:bounded<int, 1, 5>]")
		self.assertEqual(TypeRecord("low", "bounded", ("int", "1", "5"), True), record)

	def test_semicolons_and_commas_are_equivalent(self):
		a = self.parser.parse_type("tuple<int; string>")
		b = self.parser.parse_type("tuple<int, string>")
		self.assertEqual(a, b)

	def test_nested_arguments_stay_raw(self):
		record = self.parser.parse_type("variant<null, composite<not<array>, object>>")
		self.assertEqual(("null", "composite<not<array>, object>"), record.subtype)

	def test_escapes_survive_one_level(self):
		record = self.parser.parse_type(r"tuple<int; formattedString<^\d+(\%;)?\D*$>; boolean>")
		self.assertEqual(r"formattedString<^\d+(\%;)?\D*$>", record.subtype[1])
		inner = self.parser.parse_type(record.subtype[1])
		self.assertEqual((r"^\d+(\;)?\D*$",), inner.subtype)

	def test_colon_inside_arguments_is_not_a_name(self):
		record = self.parser.parse_type("formattedString<:>")
		self.assertIsNone(record.name)
		self.assertEqual((":",), record.subtype)

	def test_empty_angles_mean_no_arguments(self):
		self.assertEqual((), self.parser.parse_type("array<>").subtype)

	def test_malformed(self):
		for text in ["", "array<int", "array<int>x", "tuple<int,,string>", "a b", "array <int>"]:
			with self.subTest(text=text):
				with self.assertRaises(ParseError):
					self.parser.parse_type(text)

class ParseSignatureTests(unittest.TestCase):

	def setUp(self):
		self.parser = _parser()

	def test_stages(self):
		signature = self.parser.parse_signature("number, [string] => boolean")
		self.assertEqual(2, len(signature))
		self.assertEqual(["number", "string"], [r.type for r in signature[0]])
		self.assertTrue(signature[0][1].optional)
		self.assertEqual("boolean", signature.output()[0].type)

	def test_dependent_clauses(self):
		signature = self.parser.parse_signature("A < B, B > C :: A:int, B:int, C:int => number")
		stage = signature.inputs()
		self.assertEqual((DependentClause("A", "<", "B"), DependentClause("B", ">", "C")), stage.dependent)
		self.assertEqual(["A", "B", "C"], [r.name for r in stage])

	def test_clause_must_name_a_declared_argument(self):
		with self.assertRaises(ParseError):
			self.parser.parse_signature("C > A :: A:int => int")

	def test_clause_must_be_a_triple(self):
		with self.assertRaises(ParseError):
			self.parser.parse_signature("A > :: A:int => int")

	def test_empty_stage(self):
		for text in ["number => ", " => number", "number => => number"]:
			with self.subTest(text=text):
				with self.assertRaises(ParseError):
					self.parser.parse_signature(text)

	def test_empty_parens_are_a_wildcard(self):
		signature = self.parser.parse_signature("() => null")
		self.assertEqual("*", signature.inputs()[0].type)

	def test_nested_function_shorthand(self):
		signature = self.parser.parse_signature("(* => boolean) => array")
		self.assertEqual("function<* => boolean> => array", assemble_signature(signature))

	def test_error_illustrates_position(self):
		try:
			self.parser.parse_type("array<int>x")
		except ParseError as ex:
			self.assertIn("Unexpected text", str(ex))
		else:
			self.fail("Should have raised")

class MacroTests(unittest.TestCase):

	def setUp(self):
		self.parser = _parser()

	def test_standard_rewrites(self):
		cases = {
			"()": "*",
			"!*": "not<variant<undefined, null>>",
			"?string": "variant<undefined;null;string>",
			"^string": "not<string>",
			"name:[?int]": "name:[variant<undefined;null;int>]",
			"x:[!*]": "x:[not<variant<undefined, null>>]",
		}
		for text, expect in cases.items():
			with self.subTest(text=text):
				self.assertEqual(expect, assemble_type(self.parser.parse_type(text)))

	def test_signature_macro_handles_every_group(self):
		text = "(number => boolean), (string => (int => int)) => null"
		self.assertEqual(
			"function<number => boolean>, function<string => function<int => int>> => null",
			parenthesized_signature_to_function(text),
		)

	def test_parentheses_without_arrows_stay(self):
		text = r"formattedString<^(\d+)$> => null"
		self.assertEqual(text, parenthesized_signature_to_function(text))

	def test_custom_macro_runs_after_standard_ones(self):
		self.parser.macros.register_type_level_macro(lambda text: "int" if text == "integer" else text)
		self.assertEqual("int", self.parser.parse_type("integer").type)

	def test_macro_must_return_a_string(self):
		self.parser.macros.register_type_level_macro(lambda text: None)
		with self.assertRaises(MacroError):
			self.parser.parse_type("int")

	def test_macro_must_be_callable(self):
		with self.assertRaises(MacroError):
			self.parser.macros.register_signature_level_macro("not a function")

class AssemblerTests(unittest.TestCase):

	def test_reassembly_is_stable(self):
		parser = _parser()
		for text in [
			"int",
			"a:[bounded<int, 1, 5>]",
			"tuple<int; formattedString<^\\d+(\\%;)?\\D*$>; boolean>",
			"formattedString<a%,b>",
			"variant<undefined, null, composite<not<array>, object>>",
			"something:[!*]",
		]:
			with self.subTest(text=text):
				once = assemble_type(parser.parse_type(text))
				twice = assemble_type(parser.parse_type(once))
				self.assertEqual(once, twice)

	def test_signature_reassembly(self):
		parser = _parser()
		text = "A > B :: A:number, B:number => boolean"
		once = assemble_signature(parser.parse_signature(text))
		self.assertEqual("A > B :: A:number, B:number => boolean", once)
		self.assertEqual(parser.parse_signature(text), parser.parse_signature(once))

if __name__ == '__main__':
	unittest.main()
