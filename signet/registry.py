"""
The registry maps type names to predicates, plus the bookkeeping each predicate carries:
its parent in the subtype lattice, an optional argument pre-processor,
how many type-arguments it will accept, and the dependent operators defined on it.

Names are a shared vocabulary for the life of the registry: there is no
way to remove or redefine one. Writers take a lock; readers do not need one,
because nothing that reads ever writes.
"""
import inspect
import re
import threading
from typing import Any, Callable, Optional
from .errors import (
	DuplicateTypeError, InvalidTypeNameError, InvalidPredicateError,
	UnknownTypeError, DuplicateOperatorError, ArityError,
)

VALID_NAME = re.compile(r"[^()<>\[\]:;=,\s{}]+")
ARITY_SUFFIX = re.compile(r"(?P<name>.*?)\{\s*(?P<low>\d+)\s*(?P<comma>,)?\s*(?P<high>\d+)?\s*\}\s*")

Predicate = Callable[..., bool]

def parse_arity_declaration(declaration:str) -> tuple[str, tuple[int, Optional[int]]]:
	"""
	"name" -> any number of arguments.
	"name{n}" -> exactly n.  "name{n,}" -> at least n.  "name{n,m}" -> between n and m.
	"""
	match = ARITY_SUFFIX.fullmatch(declaration)
	if match is None:
		return declaration.strip(), (0, None)
	name = match["name"].strip()
	low = int(match["low"])
	if match["comma"] is None: high = low
	elif match["high"] is None: high = None
	else: high = int(match["high"])
	if high is not None and low > high:
		raise ArityError("Error in %s arity declaration: min cannot be greater than max" % name)
	return name, (low, high)

def positional_capacity(fn:Callable, most:int) -> int:
	""" How many leading positional arguments (up to `most`) does this callable take? """
	try: parameters = inspect.signature(fn).parameters.values()
	except (TypeError, ValueError):
		return 1
	if any(p.kind == p.VAR_POSITIONAL for p in parameters):
		return most
	positional = [p for p in parameters if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
	return min(len(positional), most)

def adapt(fn:Callable, most:int) -> Callable:
	"""
	Predicates and operators may or may not care about the trailing context
	(type-arguments, type-records) they get offered. Decide once which kind this is.
	"""
	capacity = positional_capacity(fn, most)
	if capacity >= most: return fn
	return lambda *args: fn(*args[:capacity])

def adapt_predicate(predicate:Predicate) -> Callable[[Any, Any], bool]:
	return adapt(predicate, 2)

class RegistryEntry:
	def __init__(self, name:str, predicate:Predicate, parent:Optional[str], preprocess=None, arity=(0, None), inherits=True):
		self.name = name
		self.predicate = predicate
		self.evaluate = adapt_predicate(predicate)
		self.parent = parent
		self.preprocess = preprocess
		self.arity = arity
		self.inherits = inherits
		self._operators: dict[str, Callable] = {}

	def __repr__(self): return "<type %s>" % self.name

	def check_arity(self, arguments):
		low, high = self.arity
		if len(arguments) < low:
			raise ArityError("Type %s requires, at least, %d arguments" % (self.name, low))
		if high is not None and len(arguments) > high:
			raise ArityError("Type %s accepts, at most, %d arguments" % (self.name, high))

	def accepts(self, arguments) -> bool:
		low, high = self.arity
		return low <= len(arguments) and (high is None or len(arguments) <= high)

	def define_operator(self, operator:str, operation:Callable):
		if operator in self._operators:
			raise DuplicateOperatorError("Operator %s is already defined on type %s" % (operator, self.name))
		self._operators[operator] = operation

	def operator(self, operator:str) -> Optional[Callable]:
		return self._operators.get(operator)

class Registry:
	def __init__(self):
		self._entries: dict[str, RegistryEntry] = {}
		self._lock = threading.Lock()

	def __contains__(self, name) -> bool:
		return name in self._entries

	def get(self, name:str) -> RegistryEntry:
		try: return self._entries[name]
		except KeyError: raise UnknownTypeError("No type is registered under the name %r" % (name,)) from None

	def set(self, name:str, predicate:Predicate, *, parent:Optional[str]=None, preprocess=None, arity=(0, None), inherits=True) -> RegistryEntry:
		if not isinstance(name, str) or not VALID_NAME.fullmatch(name):
			raise InvalidTypeNameError("Invalid type name: %r" % (name,))
		if not callable(predicate):
			raise InvalidPredicateError("Type predicate for %s must be callable" % name)
		if preprocess is not None and not callable(preprocess):
			raise InvalidPredicateError("Preprocessor for %s must be callable" % name)
		entry = RegistryEntry(name, predicate, parent, preprocess, arity, inherits)
		with self._lock:
			if name in self._entries:
				raise DuplicateTypeError("Type already registered with name %s" % name)
			self._entries[name] = entry
		return entry

	def names(self):
		return list(self._entries)
