"""
The public face of the library.

A Signet instance is a complete, independent type vocabulary: it owns its registry,
macros, and enforcement machinery, pre-loaded with the standard types. Nothing
is shared between instances, so an application that wants one global vocabulary
makes one instance and passes it around; a test that wants a clean slate makes another.

	signet = Signet()

	@signet.enforce("a:int, b:int => int")
	def add(a, b): return a + b

Configuration is by keyword: verbose=1 or higher reports definitions to stderr (or the given stream).
"""
from typing import Any, Callable, Iterable, Optional
from . import diagnostics
from .catalog import install_core_types
from .duck import DuckTypes
from .enforcer import Enforcer
from .errors import InputContractError
from .lattice import Lattice
from .macros import MacroEngine
from .parser import Parser
from .recursive import RecursiveTypes, iterate_on, iterate_on_array
from .registry import Registry
from .syntax import TypeRecord, Signature
from .validator import Validator

class Signet:
	def __init__(self, *, verbose:int=0, stream=None):
		self.report = diagnostics.Report(verbose=verbose, stream=stream)
		self.macros = MacroEngine()
		self.parser = Parser(self.macros)
		self.registry = Registry()
		self.lattice = Lattice(self.registry, self.parser, self.report)
		self.validator = Validator(self.lattice)
		self.enforcer = Enforcer(self.parser, self.validator, self.report)
		self.duck_types = DuckTypes(self.lattice)
		self.recursive_types = RecursiveTypes(self.lattice)
		self.core = install_core_types(self.lattice, self.macros, self.report)
		self.report.info("Signet ready with", len(self.registry.names()), "types.")

	# Defining types

	def extend(self, declaration:str, predicate:Callable, preprocess:Optional[Callable]=None):
		self.lattice.define(declaration, predicate, preprocess)

	def subtype(self, parent:str):
		define = self.lattice.define_subtype_of(parent)
		def subtype(declaration:str, predicate:Callable, preprocess:Optional[Callable]=None):
			define(declaration, predicate, preprocess)
		return subtype

	def alias(self, declaration:str, type_text:str):
		self.lattice.alias(declaration, type_text)

	def define_duck_type(self, name:str, definition):
		self.duck_types.define_duck_type(name, definition)

	def define_exact_duck_type(self, name:str, definition):
		self.duck_types.define_exact_duck_type(name, definition)

	def duck_type_factory(self, definition) -> Callable[[Any], bool]:
		return self.duck_types.duck_type_factory(definition)

	def exact_duck_type_factory(self, definition) -> Callable[[Any], bool]:
		return self.duck_types.exact_duck_type_factory(definition)

	def report_duck_type_errors(self, name:str) -> Callable[[Any], list]:
		return self.duck_types.report_duck_type_errors(name)

	def is_registered_duck_type(self, name:str) -> bool:
		return self.duck_types.is_registered_duck_type(name)

	def define_dependent_operator_on(self, type_name:str) -> Callable[[str, Callable], None]:
		return self.lattice.define_dependent_operator_on(type_name)

	def get_dependent_operator_on(self, type_name:str) -> Callable[[str], Optional[Callable]]:
		return self.lattice.get_dependent_operator_on(type_name)

	def define_recursive_type(self, name:str, iterator_factory:Callable, node_type, preprocess:Optional[Callable]=None):
		self.recursive_types.define_recursive_type(name, iterator_factory, node_type, preprocess)

	def recursive_type_factory(self, iterator_factory:Callable, node_type) -> Callable[[Any], bool]:
		return self.recursive_types.recursive_type_factory(iterator_factory, node_type)

	iterate_on = staticmethod(iterate_on)
	iterate_on_array = staticmethod(iterate_on_array)

	def register_type_level_macro(self, macro:Callable[[str], str]):
		self.macros.register_type_level_macro(macro)

	def register_signature_level_macro(self, macro:Callable[[str], str]):
		self.macros.register_signature_level_macro(macro)

	# Contracts

	def sign(self, signature:str, fn):
		return self.enforcer.sign(signature, fn)

	def enforce(self, signature:str, fn=None, options=None):
		return self.enforcer.enforce(signature, fn, options)

	def verify(self, fn, args):
		self.enforcer.verify(fn, args)

	build_input_error_message = staticmethod(diagnostics.input_error_message)
	build_output_error_message = staticmethod(diagnostics.output_error_message)

	# Asking questions

	def is_type_of(self, type_value) -> Callable[[Any], bool]:
		return self.lattice.is_type_of(type_value)

	def is_subtype_of(self, parent:str) -> Callable[[str], bool]:
		return self.lattice.is_subtype_of(parent)

	def is_type(self, name:str) -> bool:
		return self.lattice.is_type(name)

	def type_chain(self, name:str) -> str:
		return self.lattice.type_chain(name)

	def which_type(self, type_strings:Iterable[str]) -> Callable[[Any], Optional[str]]:
		return self.lattice.which_type(type_strings)

	def which_variant_type(self, variant_text:str) -> Callable[[Any], Optional[str]]:
		return self.lattice.which_type(self.parser.parse_type(variant_text).subtype)

	def verify_value_type(self, type_value) -> Callable[[Any], Any]:
		""" A checkpoint: returns the value if it fits, and complains otherwise. """
		if isinstance(type_value, str):
			record = self.parser.parse_type(type_value)
		else:
			record = type_value
		if isinstance(record, TypeRecord):
			check = self.validator.validate_type(record)
		else:
			check = self.validator.validate_type(TypeRecord(None, diagnostics.function_name(record), (), False), record)
		def verify(value):
			mismatch = check(value)
			if mismatch is not None:
				message = "Expected a value of type %s but got %s of type %s" % (mismatch.expected, diagnostics.show_value(value), mismatch.actual_type)
				raise InputContractError(message, mismatch.expected, value, mismatch.actual_type)
			return value
		return verify

	def sort_by_specificity(self, type_strings:Iterable[str]) -> list[str]:
		return self.lattice.sort_by_specificity(type_strings)

	# Text

	def parse_type(self, text:str) -> TypeRecord:
		return self.parser.parse_type(text)

	def parse_signature(self, text:str) -> Signature:
		return self.parser.parse_signature(text)
