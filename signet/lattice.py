"""
The subtype lattice: every registered type but "*" hangs from a parent,
and a value belongs to a type only if it belongs to every type up the chain.

I compose the ancestor checks once, when a predicate is asked for,
rather than walking the chain on every call. Arity and pre-processing
likewise happen once per requested predicate, so a malformed type
expression fails where it is written down rather than at some later call.
"""
from collections import Counter
from typing import Callable, Iterable, Optional, Union
from boozetools.support.foundation import strongly_connected_components_hashable
from .diagnostics import Report
from .errors import ArityError
from .parser import Parser
from .registry import Registry, RegistryEntry, parse_arity_declaration, adapt
from .syntax import TypeRecord, UNDEFINED

ROOT = "*"
PLACEHOLDER = "_"

TypeValue = Union[str, TypeRecord, Callable]

class Lattice:
	def __init__(self, registry:Registry, parser:Parser, report:Optional[Report]=None):
		self.registry = registry
		self.parser = parser
		self.report = report if report is not None else Report()
		self._bare: dict[str, Callable] = {}
		registry.set(ROOT, lambda value: True, parent=None)

	def is_type(self, name:str) -> bool:
		return name in self.registry

	def define_subtype_of(self, parent:str):
		self.registry.get(parent)
		def define(declaration:str, predicate:Callable, preprocess:Optional[Callable]=None) -> RegistryEntry:
			name, arity = parse_arity_declaration(declaration)
			entry = self.registry.set(name, predicate, parent=parent, preprocess=preprocess, arity=arity)
			self.report.info("Defined type", self.type_chain(name), level=2)
			return entry
		return define

	def define(self, declaration:str, predicate:Callable, preprocess:Optional[Callable]=None) -> RegistryEntry:
		return self.define_subtype_of(ROOT)(declaration, predicate, preprocess)

	def alias(self, declaration:str, type_text:str) -> RegistryEntry:
		"""
		The alias sits under its target's base type, but checks the whole target.
		Each "_" in the target is a hole for the alias's own arguments, filled in order,
		so an alias is a partial application. Absent an explicit arity, the alias
		takes exactly as many arguments as the target has holes.
		"""
		name, arity = parse_arity_declaration(declaration)
		target = self.parser.parse_type(type_text)
		self.registry.get(target.type)
		holes = sum(1 for argument in target.subtype if argument == PLACEHOLDER)
		if "{" not in declaration:
			arity = (holes, holes)
		def preprocess(arguments):
			return self.predicate_for(fill_placeholders(target, arguments))
		def check(value, target_check):
			return target_check(value)
		entry = self.registry.set(name, check, parent=target.type, preprocess=preprocess, arity=arity, inherits=False)
		self.report.info("Aliased", name, "as", type_text, level=2)
		return entry

	###########################################################################

	def is_type_of(self, type_value:TypeValue) -> Callable:
		if isinstance(type_value, TypeRecord):
			return self.predicate_for(type_value)
		if isinstance(type_value, str):
			return self.predicate_for(self.parser.parse_type(type_value))
		if callable(type_value):
			return type_value
		raise TypeError("Expected a type expression or a predicate, but got %r" % (type_value,))

	def predicate_for(self, record:TypeRecord) -> Callable:
		entry = self.registry.get(record.type)
		entry.check_arity(record.subtype)
		arguments = entry.preprocess(list(record.subtype)) if entry.preprocess else record.subtype
		ancestors = self._ancestors(entry, record.subtype)
		leaf = entry.evaluate
		optional = record.optional
		def check(value) -> bool:
			if optional and value is UNDEFINED:
				return True
			return all(ancestor(value) for ancestor in ancestors) and bool(leaf(value, arguments))
		return check

	def _ancestors(self, entry:RegistryEntry, arguments) -> list[Callable]:
		"""
		A parent that needs type-arguments gets the child's own, if they suit it.
		If they do not, the parent is passed over and its own ancestors stand in.
		"""
		if not entry.inherits or entry.parent is None or entry.parent == ROOT:
			return []
		parent = self.registry.get(entry.parent)
		if not parent.arity[0]:
			return [self._bare_predicate(parent.name)]
		if parent.accepts(arguments):
			return [self.predicate_for(TypeRecord(None, parent.name, tuple(arguments), False))]
		return self._ancestors(parent, ())

	def _bare_predicate(self, name:str) -> Callable:
		try: return self._bare[name]
		except KeyError: pass
		predicate = self._bare[name] = self.predicate_for(TypeRecord(None, name, (), False))
		return predicate

	###########################################################################

	def is_subtype_of(self, parent:str) -> Callable[[str], bool]:
		def check(child:str) -> bool:
			name = child
			while name is not None:
				if name == parent:
					return True
				name = self.registry.get(name).parent
			return False
		return check

	def type_chain(self, name:str) -> str:
		chain = []
		while name is not None:
			chain.append(name)
			name = self.registry.get(name).parent
		return " -> ".join(reversed(chain))

	def sort_by_specificity(self, type_strings:Iterable[str]) -> list[str]:
		"""
		Subtypes before their ancestors; otherwise, as given.
		Duplicates stay duplicated, next to each other.
		"""
		type_strings = list(type_strings)
		counts = Counter(type_strings)
		unique = list(counts)
		base = {text: self.parser.parse_type(text).type for text in unique}
		graph = {
			text: [
				other for other in unique
				if base[other] != base[text] and self.is_subtype_of(base[text])(base[other])
			]
			for text in unique
		}
		order = [text for component in strongly_connected_components_hashable(graph) for text in component]
		return [text for text in order for _ in range(counts[text])]

	def which_type(self, type_strings:Iterable[str]) -> Callable:
		checks = [(text, self.is_type_of(text)) for text in type_strings]
		def which(value) -> Optional[str]:
			for text, check in checks:
				if check(value):
					return text
			return None
		return which

	###########################################################################

	def define_dependent_operator_on(self, type_name:str):
		entry = self.registry.get(type_name)
		def define(operator:str, operation:Callable):
			entry.define_operator(operator, adapt(operation, 4))
			self.report.info("Defined operator", operator, "on", type_name, level=2)
		return define

	def get_dependent_operator_on(self, type_name:str):
		def lookup(operator:str) -> Optional[Callable]:
			name = type_name
			while name is not None:
				entry = self.registry.get(name)
				operation = entry.operator(operator)
				if operation is not None:
					return operation
				name = entry.parent
			return None
		return lookup

def fill_placeholders(target:TypeRecord, arguments) -> TypeRecord:
	supply = list(arguments)
	filled = []
	for argument in target.subtype:
		if argument == PLACEHOLDER:
			if not supply:
				raise ArityError("Type %s has unfilled placeholders" % target.type)
			filled.append(supply.pop(0))
		else:
			filled.append(argument)
	return target.with_subtype(filled + supply)
