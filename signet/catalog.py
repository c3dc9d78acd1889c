"""
The standard vocabulary: primitives, algebraic types, the numeric, string
and array refinements, their aliases, and the dependent operators among them.

Python is not the language these names first described, so each one needed
a reading. In brief: "number" means int or float (never bool, never NaN),
"object" means anything that is neither a scalar nor None nor callable,
"array" means list or tuple, "symbol" means an Enum member, "undefined" is
the UNDEFINED marker, and "null" is None.
"""
import enum
import inspect
import math
import operator
import re
from collections.abc import Mapping
from .assembler import assemble_signature
from .diagnostics import Report
from .enforcer import EnforcedFunction
from .errors import SubtypeArgumentError, ParseError
from .lattice import Lattice
from .macros import MacroEngine, install_standard_macros
from .syntax import UNDEFINED

SCALARS = (bool, int, float, complex, str, bytes)

###############################################################################
#  Plain predicates

def is_boolean(value): return isinstance(value, bool)
def is_function(value): return callable(value)
def is_string(value): return isinstance(value, str)
def is_symbol(value): return isinstance(value, enum.Enum)
def is_undefined(value): return value is UNDEFINED
def is_null(value): return value is None
def is_regexp(value): return isinstance(value, re.Pattern)
def is_promise(value): return inspect.isawaitable(value)
def is_arguments(value): return isinstance(value, (tuple, list, Mapping))

def is_number(value):
	return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)

def is_object(value):
	return value is not None and value is not UNDEFINED and not isinstance(value, SCALARS) and not callable(value)

def is_integral(value):
	if isinstance(value, float):
		return value.is_integer()
	return isinstance(value, int)

def is_finite(value):
	return math.isfinite(value)

###############################################################################
#  Parametric predicates. Each takes the value and whatever its pre-processor made of the arguments.

def check_not(value, predicates): return not predicates[0](value)
def check_variant(value, predicates): return any(p(value) for p in predicates)
def check_composite(value, predicates): return all(p(value) for p in predicates)

def check_array(value, element):
	return isinstance(value, (list, tuple)) and (element is None or all(element(item) for item in value))

def check_tuple(value, predicates):
	return len(value) == len(predicates) and all(p(item) for p, item in zip(predicates, value))

def check_unordered_product(value, predicates):
	""" Most specific types go first, each claiming the first value it accepts. """
	if len(value) != len(predicates):
		return False
	pool = list(value)
	for predicate in predicates:
		for index, candidate in enumerate(pool):
			if predicate(candidate):
				del pool[index]
				break
		else:
			return False
	return True

def check_bounded(value, bounds):
	predicate, sized, low, high = bounds
	if not predicate(value):
		return False
	measure = len(value) if sized else value
	return low <= measure <= high

def check_formatted_string(value, pattern): return pattern.search(value) is not None

def check_decimal_precision(value, precision):
	magnitude = 10 ** precision
	return value == math.floor(value * magnitude) / magnitude

def check_sequence(value, element):
	return all(element(item) for item in value)

def _monotone_order(values):
	return operator.gt if values[0] > values[1] else operator.lt

def check_monotone(value, element):
	if not check_sequence(value, element):
		return False
	if len(value) < 2:
		return True
	compare = _monotone_order(value)
	return all(compare(a, b) for a, b in zip(value, value[1:]))

def check_increasing(value, element):
	return check_monotone(value, element) and (len(value) < 2 or value[0] < value[1])

def check_decreasing(value, element):
	return check_monotone(value, element) and (len(value) < 2 or value[0] > value[1])

###############################################################################
#  Dependent operators

def negate(relation):
	return lambda a, b: not relation(a, b)

def _properties(value) -> dict:
	if isinstance(value, Mapping):
		return dict(value)
	return vars(value)

def _shares_properties(a, b):
	a, b = _properties(a), _properties(b)
	return all(key in a and a[key] == b[key] for key in b)

def objects_equal(a, b):
	if a is None or b is None or a is b:
		return a is b
	return len(_properties(a)) == len(_properties(b)) and _shares_properties(a, b)

def property_superset(a, b):
	return len(_properties(a)) >= len(_properties(b)) and _shares_properties(a, b)

def property_subset(a, b):
	return property_superset(b, a)

def property_congruence(a, b):
	return len(_properties(a)) == len(_properties(b)) and _shares_properties(a, b)

def equal_length(a, b): return len(a) == len(b)
def shorter(a, b): return len(a) < len(b)
def longer(a, b): return len(a) > len(b)

###############################################################################

class CoreTypes:
	"""
	Installs the standard vocabulary into a lattice, and keeps the few
	pre-processors and operators that need to consult it.
	"""
	def __init__(self, lattice:Lattice, report:Report):
		self.lattice = lattice
		self.report = report
		self._number = lattice.is_subtype_of("number")
		self._string = lattice.is_subtype_of("string")
		self._array = lattice.is_subtype_of("array")

	# Pre-processors

	def predicates(self, arguments):
		return [self.lattice.is_type_of(argument) for argument in arguments]

	def tagged_union(self, arguments):
		self.report.notice_once("taggedUnion", "Tagged Union is deprecated, use variant instead.")
		return self.predicates(arguments)

	def element(self, arguments):
		if not arguments or arguments[0] == "*":
			return None
		return self.lattice.is_type_of(arguments[0])

	def sequence_element(self, arguments):
		base = self.lattice.parser.parse_type(arguments[0]).type
		if not (self._number(base) or self._string(base)):
			raise SubtypeArgumentError("A sequence may only be comprised of numbers, strings or their subtypes.")
		return self.lattice.is_type_of(arguments[0])

	def bounds(self, arguments):
		text, low, high = arguments
		base = self.lattice.parser.parse_type(text).type
		sized = self._string(base) or self._array(base)
		if not (sized or self._number(base)):
			raise SubtypeArgumentError("Bounded type only accepts types of number, string, array or subtypes of these.")
		try: low, high = float(low), float(high)
		except ValueError:
			raise SubtypeArgumentError("Bounds must be numbers, but got %r and %r" % (low, high)) from None
		return self.lattice.is_type_of(text), sized, low, high

	def specificity(self, arguments):
		return self.predicates(self.lattice.sort_by_specificity(arguments))

	@staticmethod
	def pattern(arguments):
		try: return re.compile(";".join(arguments))
		except re.error as ex:
			raise SubtypeArgumentError("Not a usable regular expression: %s" % ex) from None

	@staticmethod
	def precision(arguments):
		try: precision = float(arguments[0])
		except ValueError: precision = math.nan
		if not (is_integral(precision) and precision >= 0):
			raise SubtypeArgumentError("Precision value must be of type leftBoundedInt<0>, but got: %s" % arguments[0])
		return int(precision)

	def signature_text(self, arguments):
		if not arguments:
			return None
		return assemble_signature(self.lattice.parser.parse_signature(", ".join(arguments)))

	# Predicates that consult the registry

	def is_registered_type(self, value):
		if callable(value):
			return True
		try: record = self.lattice.parser.parse_type(value)
		except ParseError: return False
		return self.lattice.is_type(record.type)

	def is_enforced_function(self, value, signature):
		return isinstance(value, EnforcedFunction) and (signature is None or value.signature == signature)

	# Operators on variants compare which of the alternatives each side matched.

	def _variant_names(self, a, b, a_record, b_record):
		if a_record is None or b_record is None:
			return None, None
		return self.lattice.which_type(a_record.subtype)(a), self.lattice.which_type(b_record.subtype)(b)

	def _base(self, text):
		return self.lattice.parser.parse_type(text).type

	def same_variant(self, a, b, a_record, b_record):
		""" Two values that fit no alternative at all count as the same variant. """
		if a_record is None or b_record is None:
			return False
		a_name, b_name = self._variant_names(a, b, a_record, b_record)
		return a_name == b_name

	def variant_subtype(self, a, b, a_record, b_record):
		a_name, b_name = self._variant_names(a, b, a_record, b_record)
		if a_name is None or b_name is None:
			return False
		return self.lattice.is_subtype_of(self._base(b_name))(self._base(a_name))

	def variant_supertype(self, a, b, a_record, b_record):
		return self.variant_subtype(b, a, b_record, a_record)

	###########################################################################

	def install(self):
		lattice = self.lattice
		define, subtype, alias = lattice.define, lattice.define_subtype_of, lattice.alias

		define("boolean{0}", is_boolean)
		define("function{0,}", is_function, ", ".join)
		define("number{0}", is_number)
		define("object{0}", is_object)
		define("string{0}", is_string)
		define("symbol{0}", is_symbol)
		define("undefined{0}", is_undefined)
		define("null{0}", is_null)
		define("not{1}", check_not, self.predicates)
		define("variant{1,}", check_variant, self.predicates)
		define("taggedUnion{1,}", check_variant, self.tagged_union)
		define("composite{1,}", check_composite, self.predicates)
		define("bounded{3}", check_bounded, self.bounds)
		define("promise{0}", is_promise)

		subtype("function")("enforcedFunction{0,}", self.is_enforced_function, self.signature_text)

		subtype("number")("int{0}", is_integral)
		subtype("number")("finiteNumber{0}", is_finite)
		subtype("number")("decimalPrecision{1}", check_decimal_precision, self.precision)
		subtype("finiteNumber")("finiteInt{0}", is_integral)

		subtype("object")("array{0,}", check_array, self.element)
		subtype("object")("regexp{0}", is_regexp)
		subtype("object")("arguments{0}", is_arguments)

		subtype("string")("formattedString{1}", check_formatted_string, self.pattern)

		subtype("array")("tuple{1,}", check_tuple, self.predicates)
		subtype("array")("unorderedProduct{1,}", check_unordered_product, self.specificity)
		subtype("array")("sequence{1}", check_sequence, self.sequence_element)
		subtype("array")("monotoneSequence{1}", check_monotone, self.sequence_element)
		subtype("array")("increasingSequence{1}", check_increasing, self.sequence_element)
		subtype("array")("decreasingSequence{1}", check_decreasing, self.sequence_element)

		alias("leftBounded", "bounded<_, _, Infinity>")
		alias("rightBounded", "bounded<_, -Infinity, _>")
		for kind in ("String", "Number", "FiniteNumber", "Int", "FiniteInt"):
			type_name = kind[0].lower() + kind[1:]
			alias("bounded%s{2}" % kind, "bounded<%s, _, _>" % type_name)
			alias("leftBounded%s{1}" % kind, "leftBounded<%s, _>" % type_name)
			alias("rightBounded%s{1}" % kind, "rightBounded<%s, _>" % type_name)

		alias("typeValue{0}", "variant<string, function>")
		subtype("typeValue")("type{0}", self.is_registered_type)

		alias("any{0}", "*")
		alias("void{0}", "*")

		self.install_operators()

	def install_operators(self):
		on = self.lattice.define_dependent_operator_on

		number = on("number")
		number(">", operator.gt)
		number("<", operator.lt)
		number("=", operator.eq)
		number(">=", operator.ge)
		number("<=", operator.le)
		number("!=", operator.ne)

		string = on("string")
		string("=", operator.eq)
		string("!=", operator.ne)
		string("#=", equal_length)
		string("#<", shorter)
		string("#>", longer)

		array = on("array")
		array("#=", equal_length)
		array("#<", shorter)
		array("#>", longer)

		obj = on("object")
		obj("=", objects_equal)
		obj("!=", negate(objects_equal))
		obj(":>", property_superset)
		obj(":<", property_subset)
		obj(":=", property_congruence)
		obj(":!=", negate(property_congruence))

		variant = on("variant")
		variant("isTypeOf", self.same_variant)
		variant("=:", self.same_variant)
		variant("<:", self.variant_subtype)
		variant(">:", self.variant_supertype)

def install_core_types(lattice:Lattice, macros:MacroEngine, report:Report) -> CoreTypes:
	install_standard_macros(macros)
	core = CoreTypes(lattice, report)
	core.install()
	return core
