"""
Structural types: "anything with these properties, of these types."

A definition is a mapping from property name to what the property must be:
a type expression, an ad-hoc predicate, or a Python class (meaning isinstance).
A class may also serve as the whole definition, in which case its annotations
(collected base-first along the MRO) are the mapping.

Properties are read by key from mappings and by attribute from everything else.
A property that is not there reads as UNDEFINED, so "[int]" and "?int" work as expected.
"""
import inspect
from collections.abc import Mapping
from typing import Any, Callable
from .assembler import assemble_type
from .catalog import SCALARS, is_object
from .errors import UnknownDuckTypeError, DuplicatePropertyError
from .lattice import Lattice
from .syntax import UNDEFINED

BAD_VALUE = "badDuckTypeValue"

def read_property(value, key:str):
	if isinstance(value, Mapping):
		return value.get(key, UNDEFINED)
	return getattr(value, key, UNDEFINED)

def is_candidate(value) -> bool:
	""" Anything that could carry properties. Callables qualify; registered duck types add "object" on top. """
	return value is not None and value is not UNDEFINED and not isinstance(value, SCALARS)

def own_property_count(value) -> int:
	if isinstance(value, Mapping):
		return len(value)
	if hasattr(value, "_fields"):
		return len(value._fields)
	names = set(getattr(value, "__dict__", ()))
	for klass in type(value).__mro__:
		slots = klass.__dict__.get("__slots__", ())
		if isinstance(slots, str): slots = (slots,)
		names.update(slot for slot in slots if slot not in ("__dict__", "__weakref__") and hasattr(value, slot))
	return len(names)

def class_properties(cls:type) -> dict[str, Any]:
	properties = {}
	for klass in reversed(cls.__mro__):
		for key, annotation in inspect.get_annotations(klass).items():
			if key in properties:
				raise DuplicatePropertyError("Property %r of %s is already declared further up the class hierarchy." % (key, cls.__name__))
			properties[key] = annotation
	return properties

class Property:
	__slots__ = ("key", "check", "display", "base")
	def __init__(self, key:str, check:Callable, display:str, base):
		self.key, self.check, self.display, self.base = key, check, display, base

def structural_check(properties:list, exact:bool) -> Callable[[Any], bool]:
	size = len(properties)
	def check(value) -> bool:
		return (
			is_candidate(value)
			and (not exact or own_property_count(value) == size)
			and all(p.check(read_property(value, p.key)) for p in properties)
		)
	return check

class DuckTypes:
	def __init__(self, lattice:Lattice):
		self.lattice = lattice
		self._reporters: dict[str, Callable] = {}

	def compile(self, definition) -> list[Property]:
		if isinstance(definition, type):
			definition = class_properties(definition)
		return [self._property(key, spec) for key, spec in definition.items()]

	def _property(self, key, spec) -> Property:
		if isinstance(spec, str):
			record = self.lattice.parser.parse_type(spec)
			return Property(key, self.lattice.is_type_of(record), assemble_type(record), record.type)
		if isinstance(spec, type):
			return Property(key, lambda value: isinstance(value, spec), spec.__name__, None)
		return Property(key, self.lattice.is_type_of(spec), getattr(spec, "__name__", repr(spec)), None)

	def duck_type_factory(self, definition) -> Callable[[Any], bool]:
		return structural_check(self.compile(definition), exact=False)

	def exact_duck_type_factory(self, definition) -> Callable[[Any], bool]:
		return structural_check(self.compile(definition), exact=True)

	def define_duck_type(self, name:str, definition):
		self._define(name, definition, exact=False)

	def define_exact_duck_type(self, name:str, definition):
		self._define(name, definition, exact=True)

	def _define(self, name, definition, exact):
		properties = self.compile(definition)
		self.lattice.define_subtype_of("object")(name, structural_check(properties, exact))
		self._reporters[name] = self._error_reporter(properties)

	def _error_reporter(self, properties:list[Property]):
		def report(value) -> list:
			if not is_object(value):
				return [[BAD_VALUE, "object", value]]
			errors = []
			for p in properties:
				actual = read_property(value, p.key)
				if not p.check(actual):
					if p.base in self._reporters:
						actual = self._reporters[p.base](actual)
					errors.append([p.key, p.display, actual])
			return errors
		return report

	def is_registered_duck_type(self, name:str) -> bool:
		return name in self._reporters

	def report_duck_type_errors(self, name:str) -> Callable[[Any], list]:
		try: return self._reporters[name]
		except KeyError: raise UnknownDuckTypeError("No duck type is registered under the name %r" % (name,)) from None
