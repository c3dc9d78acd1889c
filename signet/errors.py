"""
Everything that can go wrong, in one place.

All of these are programmer mistakes rather than transient conditions,
so nothing here is ever retried. Each carries enough context to find the
offending type name, parameter, or value from the message alone.
"""
from boozetools.support.failureprone import illustration

class SignetError(Exception):
	pass

class ParseError(SignetError):
	""" Malformed type or signature text. Knows where it got confused. """
	def __init__(self, text:str, position:int, problem:str):
		super().__init__(text, position, problem)
		self.text, self.position, self.problem = text, position, problem
	def __str__(self):
		position = min(max(self.position, 0), len(self.text))
		return "%s\n%s" % (self.problem, illustration(self.text, position, 1, caption=self.problem))

class MacroError(SignetError):
	pass

class RegistryError(SignetError):
	pass

class DuplicateTypeError(RegistryError):
	pass

class InvalidTypeNameError(RegistryError):
	pass

class InvalidPredicateError(RegistryError):
	pass

class UnknownTypeError(RegistryError):
	pass

class DuplicateOperatorError(RegistryError):
	pass

class ArityError(SignetError):
	pass

class SubtypeArgumentError(SignetError):
	""" A parametric type got arguments of the right number but the wrong kind. """

class SignatureShapeError(SignetError):
	pass

class NoOutputTypeError(SignatureShapeError):
	pass

class SignatureTooShortError(SignatureShapeError):
	pass

class MultipleOutputTypesError(SignatureShapeError):
	pass

class InvalidSignatureTypesError(SignetError):
	def __init__(self, message, invalid_types):
		super().__init__(message)
		self.invalid_types = invalid_types

class ContractError(SignetError):
	def __init__(self, message, expected, value, actual_type):
		super().__init__(message)
		self.expected = expected
		self.value = value
		self.actual_type = actual_type

class InputContractError(ContractError):
	pass

class OutputContractError(ContractError):
	pass

class DependentRelationError(InputContractError):
	def __init__(self, message, clause, left, right):
		super().__init__(message, clause.left+" "+clause.operator+" "+clause.right, (left, right), None)
		self.operator = clause.operator
		self.left = left
		self.right = right

class NotSignedError(SignetError):
	pass

class DuckTypeError(SignetError):
	pass

class UnknownDuckTypeError(DuckTypeError):
	pass

class DuplicatePropertyError(DuckTypeError):
	pass
