"""
The parse-records for type expressions and signatures.
The parser builds these fresh on every call; nothing downstream mutates them.
Subtype arguments stay as raw text: what they mean is up to the type that receives them.
"""
from typing import NamedTuple, Optional, Sequence

class _Undefined:
	""" Python has no "undefined", so this stands in for a missing argument or property. """
	_instance = None
	def __new__(cls):
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance
	def __repr__(self): return "undefined"
	def __bool__(self): return False
	def __reduce__(self): return (_Undefined, ())

UNDEFINED = _Undefined()

class TypeRecord(NamedTuple):
	name: Optional[str]
	type: str
	subtype: tuple[str, ...]
	optional: bool

	def with_subtype(self, subtype:Sequence[str]) -> "TypeRecord":
		return self._replace(subtype=tuple(subtype))

class DependentClause(NamedTuple):
	left: str
	operator: str
	right: str

class Stage:
	""" One arrow-segment: a list of argument types plus the relations among them. """
	def __init__(self, types:Sequence[TypeRecord], dependent:Sequence[DependentClause]=()):
		self.types = tuple(types)
		self.dependent = tuple(dependent)
	def __len__(self): return len(self.types)
	def __iter__(self): return iter(self.types)
	def __getitem__(self, index): return self.types[index]
	def __eq__(self, other): return type(other) is Stage and (self.types, self.dependent) == (other.types, other.dependent)
	def __hash__(self): return hash((self.types, self.dependent))
	def __repr__(self): return "<Stage %r :: %r>" % (self.dependent, self.types)
	def record_named(self, name:str) -> Optional[TypeRecord]:
		for record in self.types:
			if record.name == name:
				return record
		return None
	def position_of(self, name:str) -> int:
		for index, record in enumerate(self.types):
			if record.name == name:
				return index
		return -1

class Signature:
	""" The whole arrow-chain. The last stage is the output. """
	def __init__(self, stages:Sequence[Stage]):
		self.stages = tuple(stages)
	def __len__(self): return len(self.stages)
	def __iter__(self): return iter(self.stages)
	def __getitem__(self, index):
		if isinstance(index, slice):
			return Signature(self.stages[index])
		return self.stages[index]
	def __eq__(self, other): return type(other) is Signature and self.stages == other.stages
	def __hash__(self): return hash(self.stages)
	def __repr__(self): return "<Signature %r>" % (self.stages,)
	def inputs(self) -> Stage: return self.stages[0]
	def output(self) -> Stage: return self.stages[-1]
	def is_curried(self) -> bool: return len(self.stages) > 2
	def each_record(self):
		for stage in self.stages:
			yield from stage.types
