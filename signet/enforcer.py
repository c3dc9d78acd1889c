"""
Signing and enforcement of function contracts.

To sign a function is just to label it with its (checked) signature.
To enforce one is to wrap it so every call checks its arguments going in
and its result coming out. A signature with more than one arrow describes a
curried function: the result must be a function, and it gets wrapped in turn
against the remaining stages. Each such wrapper is a fresh object; nothing
ever modifies a wrapper after it is made.

Per call the life-cycle is simple: validate inputs (maybe reject), invoke,
validate output (maybe reject), then return the result or its wrapper.
"""
import copy
import functools
import inspect
from collections.abc import Mapping
from typing import Callable, Optional, Sequence
from boozetools.support.foundation import Visitor
from . import diagnostics
from .assembler import assemble_signature, assemble_type
from .errors import (
	NoOutputTypeError, SignatureTooShortError, MultipleOutputTypesError, InvalidSignatureTypesError,
	InputContractError, OutputContractError, DependentRelationError, NotSignedError,
)
from .parser import Parser
from .registry import adapt
from .syntax import Signature, Stage, TypeRecord, UNDEFINED
from .validator import Validator, Mismatch

IMPLICIT_FIRST = ("self", "cls")
UNBOUND = object()

class UnknownTypes(Visitor):
	""" Collects every record in a signature whose base type nobody registered. """
	def __init__(self, is_type:Callable[[str], bool]):
		self.is_type = is_type

	def visit_Signature(self, signature:Signature, found:list):
		for stage in signature:
			self.visit(stage, found)
		return found

	def visit_Stage(self, stage:Stage, found:list):
		for record in stage:
			self.visit(record, found)

	def visit_TypeRecord(self, record:TypeRecord, found:list):
		if not self.is_type(record.type):
			found.append(record)

def _parameters(fn):
	try: return list(inspect.signature(fn).parameters.values())
	except (TypeError, ValueError): return None

def _explicit_parameters(parameters):
	if parameters and parameters[0].name in IMPLICIT_FIRST:
		return parameters[1:]
	return parameters

def required_positional_count(fn) -> int:
	parameters = _parameters(fn)
	if parameters is None:
		return 0
	return sum(
		1 for p in _explicit_parameters(parameters)
		if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
	)

def arguments_by_position(fn, args:Sequence, kwargs:Mapping, instance=UNBOUND) -> list:
	""" Line keyword arguments up with the signature; what nobody supplied reads as UNDEFINED. """
	if not kwargs:
		return list(args)
	signature = inspect.signature(fn)
	if instance is not UNBOUND:
		bound = signature.bind_partial(instance, *args, **kwargs)
		parameters = list(signature.parameters.values())[1:]
	else:
		bound = signature.bind_partial(*args, **kwargs)
		parameters = list(signature.parameters.values())
	values = []
	for p in parameters:
		if p.kind == p.VAR_POSITIONAL:
			values.extend(bound.arguments.get(p.name, ()))
		elif p.kind != p.VAR_KEYWORD:
			values.append(bound.arguments.get(p.name, UNDEFINED))
	return values

def arguments_from_mapping(fn, namespace:Mapping) -> list:
	parameters = _explicit_parameters(_parameters(fn) or [])
	return [namespace.get(p.name, UNDEFINED) for p in parameters if p.kind != p.VAR_KEYWORD]

class Enforcer:
	def __init__(self, parser:Parser, validator:Validator, report:diagnostics.Report):
		self.parser = parser
		self.validator = validator
		self.report = report
		self._unknown = UnknownTypes(validator.lattice.is_type)
		self.function_record = parser.parse_type("function")

	def parse_and_check(self, signature:str, fn) -> Signature:
		tree = self.parser.parse_signature(signature)
		self.check_shape(tree, fn)
		return tree

	def check_shape(self, tree:Signature, fn):
		if len(tree) < 2:
			raise NoOutputTypeError("Signature must have both input and output types")
		required = required_positional_count(fn)
		if len(tree.inputs()) < required:
			raise SignatureTooShortError("Signature declaration too short for function with %d arguments." % required)
		if len(tree.output()) > 1:
			raise MultipleOutputTypesError("Signature can only have a single output type")
		invalid = self._unknown.visit(tree, [])
		if invalid:
			names = [assemble_type(record) for record in invalid]
			raise InvalidSignatureTypesError("Signature contains invalid types: " + ", ".join(names), names)

	def sign(self, signature:str, fn):
		tree = self.parse_and_check(signature, fn)
		fn.signature_tree = tree
		fn.signature = assemble_signature(tree)
		self.report.info("Signed", diagnostics.function_name(fn), "::", fn.signature, level=2)
		return fn

	def enforce(self, signature:str, fn=None, options:Optional[Mapping]=None):
		if fn is None:
			return lambda fn: self.enforce(signature, fn, options)
		tree = self.parse_and_check(signature, fn)
		enforced = EnforcedFunction(self, tree, fn, options)
		self.report.info("Enforcing", enforced.function_name, "::", enforced.signature, level=2)
		return enforced

	def verify(self, fn, args):
		tree = getattr(fn, "signature_tree", None)
		if not isinstance(tree, Signature):
			raise NotSignedError("%s has no signature to verify against. Sign it first." % diagnostics.function_name(fn))
		if isinstance(args, Mapping):
			args = arguments_from_mapping(fn, args)
		mismatch = self.validator.validate_arguments(tree.inputs())(list(args))
		if mismatch is not None:
			raise self.input_error(mismatch, args, tree, diagnostics.function_name(fn), None)

	###########################################################################

	def input_error(self, mismatch:Mismatch, args, tree, name, options) -> InputContractError:
		builder = _option(options, "input_error_builder")
		if mismatch.clause is not None:
			clause = mismatch.clause
			left, right = mismatch.value
			if builder is None:
				right_text = diagnostics.show_value(right)
				if tree.inputs().record_named(clause.right) is not None:
					right_text = "%s = %s" % (clause.right, right_text)
				left_text = "%s = %s" % (clause.left, diagnostics.show_value(left))
				message = diagnostics.dependent_error_message(clause, left_text, right_text, name)
			else:
				message = builder(mismatch, args, tree, name)
			return DependentRelationError(message, mismatch.clause, left, right)
		builder = builder or diagnostics.input_error_message
		return InputContractError(builder(mismatch, args, tree, name), mismatch.expected, mismatch.value, mismatch.actual_type)

	def output_error(self, mismatch:Mismatch, args, tree, name, options) -> OutputContractError:
		builder = _option(options, "output_error_builder") or diagnostics.output_error_message
		return OutputContractError(builder(mismatch, args, tree, name), mismatch.expected, mismatch.value, mismatch.actual_type)

def _option(options, key):
	if not options or options.get(key) is None:
		return None
	return adapt(options[key], 4)

class EnforcedFunction:
	"""
	A callable stand-in for the wrapped function. It binds like a method
	when found on a class, so "self" gets passed through without being checked.
	"""
	def __init__(self, enforcer:Enforcer, signature_tree:Signature, fn, options=None):
		functools.update_wrapper(self, fn)
		self.__dict__.pop("signature", None)
		self.signature_tree = signature_tree
		self._enforcer = enforcer
		self._options = options
		self._instance = UNBOUND
		validator = enforcer.validator
		self._check_inputs = validator.validate_arguments(signature_tree.inputs())
		if signature_tree.is_curried():
			self._check_output = validator.validate_type(enforcer.function_record)
		else:
			self._check_output = validator.validate_type(signature_tree.output()[0])

	@functools.cached_property
	def signature(self) -> str:
		return assemble_signature(self.signature_tree)

	@property
	def function_name(self) -> str:
		return diagnostics.function_name(self.__wrapped__)

	def __repr__(self):
		return "<enforced %s :: %s>" % (self.function_name, self.signature)

	def __get__(self, instance, owner=None):
		if instance is None:
			return self
		bound = copy.copy(self)
		bound._instance = instance
		return bound

	def __call__(self, *args, **kwargs):
		tree, name = self.signature_tree, self.function_name
		values = arguments_by_position(self.__wrapped__, args, kwargs, self._instance)
		mismatch = self._check_inputs(values)
		if mismatch is not None:
			raise self._enforcer.input_error(mismatch, values, tree, name, self._options)
		if self._instance is UNBOUND:
			result = self.__wrapped__(*args, **kwargs)
		else:
			result = self.__wrapped__(self._instance, *args, **kwargs)
		mismatch = self._check_output(result)
		if mismatch is not None:
			raise self._enforcer.output_error(mismatch, values, tree, name, self._options)
		if tree.is_curried():
			return EnforcedFunction(self._enforcer, tree[1:], result, self._options)
		return result
