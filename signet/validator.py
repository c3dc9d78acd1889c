"""
Checks an argument list against one stage of a signature.

Positional checking goes left to right and stops at the first argument that
does not fit. An optional slot may be passed over, leaving the argument for
the next slot, but only while there is a next slot or nothing was supplied.
Then come the dependent relations, in the order written.
"""
import re
from typing import Any, Callable, NamedTuple, Optional, Sequence
from .assembler import assemble_type
from .errors import ParseError
from .lattice import Lattice
from .syntax import Stage, TypeRecord, DependentClause, UNDEFINED

PRIMITIVE_NAMES = ("boolean", "null", "undefined", "number", "string", "array", "function", "symbol", "object")

INTEGER = re.compile(r"[-+]?\d+")
NUMERIC = re.compile(r"[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?|[-+]?Infinity")
BOOLEAN = {"true": True, "false": False, "True": True, "False": False}

class Mismatch(NamedTuple):
	expected: str
	value: Any
	actual_type: Optional[str] = None
	clause: Optional[DependentClause] = None

class Binding(NamedTuple):
	value: Any
	record: Optional[TypeRecord]

class Validator:
	def __init__(self, lattice:Lattice):
		self.lattice = lattice
		self._actual = None

	def actual_type_name(self, value) -> str:
		if self._actual is None:
			names = [name for name in PRIMITIVE_NAMES if self.lattice.is_type(name)]
			self._actual = self.lattice.which_type(names)
		return self._actual(value) or type(value).__name__

	def checks_for(self, stage:Stage) -> list[Callable]:
		return [self.lattice.is_type_of(record) for record in stage.types]

	def validate_arguments(self, stage:Stage, checks:Optional[Sequence[Callable]]=None):
		if checks is None:
			checks = self.checks_for(stage)
		def validate(arguments:Sequence) -> Optional[Mismatch]:
			bound = {}
			mismatch = self._positional(stage, checks, arguments, bound)
			if mismatch is None and stage.dependent:
				mismatch = self._relations(stage, bound)
			return mismatch
		return validate

	def validate_type(self, record:TypeRecord, check:Optional[Callable]=None):
		check = check or self.lattice.is_type_of(record)
		def validate(value) -> Optional[Mismatch]:
			if check(value):
				return None
			return Mismatch(assemble_type(record), value, self.actual_type_name(value))
		return validate

	def _positional(self, stage:Stage, checks, arguments:Sequence, bound:dict) -> Optional[Mismatch]:
		position, remaining = 0, len(stage.types)
		for record, check in zip(stage.types, checks):
			argument = arguments[position] if position < len(arguments) else UNDEFINED
			if check(argument):
				position += 1
				if record.name is not None:
					bound[record.name] = Binding(argument, record)
			elif not (record.optional and (remaining > 1 or argument is UNDEFINED)):
				return Mismatch(assemble_type(record), argument, self.actual_type_name(argument))
			remaining -= 1
		return None

	def _relations(self, stage:Stage, bound:dict) -> Optional[Mismatch]:
		for clause in stage.dependent:
			left = bound.get(clause.left)
			if left is None or left.value is UNDEFINED:
				# The argument was optional and not supplied.
				continue
			if clause.right in bound:
				right = bound[clause.right]
				if right.value is UNDEFINED:
					continue
			elif stage.record_named(clause.right) is not None:
				continue
			else:
				right = self.resolve_operand(clause.right)
			if not self.relation_holds(clause, left, right):
				return Mismatch(" ".join(clause), (left.value, right.value), None, clause)
		return None

	def relation_holds(self, clause:DependentClause, left:Binding, right:Binding) -> bool:
		operation = self.lattice.get_dependent_operator_on(left.record.type)(clause.operator)
		if operation is None:
			return False
		try: return bool(operation(left.value, right.value, left.record, right.record))
		except TypeError: return False

	def resolve_operand(self, token:str) -> Binding:
		""" A literal, a type expression, or failing those, just the word itself. """
		if token in BOOLEAN:
			return Binding(BOOLEAN[token], None)
		if INTEGER.fullmatch(token):
			return Binding(int(token), None)
		if NUMERIC.fullmatch(token):
			return Binding(float(token), None)
		if len(token) >= 2 and token[0] == token[-1] and token[0] in "'\"":
			return Binding(token[1:-1], None)
		try: record = self.lattice.parser.parse_type(token)
		except ParseError: return Binding(token, None)
		if self.lattice.is_type(record.type):
			return Binding(token, record)
		return Binding(token, None)
