"""
Chatter and complaint.

The Report is where the library says things to a human who asked to hear them.
It stays quiet unless constructed with a positive verbosity, except for
one-time notices (deprecations, mostly) which always go out, once.

The message builders live here too, because an enforced function's error
message is the one piece of diagnostic text every user eventually reads.
"""
import sys
from typing import Any, Optional, Sequence

class Report:
	def __init__(self, *, verbose:int=0, stream=None):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._stream = stream
		self._noticed = set()

	@property
	def verbose(self) -> int: return self._verbose

	def _out(self):
		return self._stream if self._stream is not None else sys.stderr

	def info(self, *args, level:int=1):
		if self._verbose >= level:
			print(*args, file=self._out())

	def notice_once(self, key:str, message:str):
		if key not in self._noticed:
			self._noticed.add(key)
			print(message, file=self._out())

###############################################################################

def function_name(fn) -> str:
	name = getattr(fn, "__name__", None)
	if not name or name == "<lambda>":
		return "Anonymous"
	return name

def show_value(value:Any) -> str:
	return repr(value)

def input_error_message(validation_result:Sequence, args:Sequence, signature_tree, name:Optional[str]=None) -> str:
	expected, value, actual_type = _unpack(validation_result)
	return "%s expected a value of type %s but got %s of type %s" % (name or "Anonymous", expected, show_value(value), actual_type)

def output_error_message(validation_result:Sequence, args:Sequence, signature_tree, name:Optional[str]=None) -> str:
	expected, value, actual_type = _unpack(validation_result)
	return "%s expected a return value of type %s but got %s of type %s" % (name or "Anonymous", expected, show_value(value), actual_type)

def dependent_error_message(clause, left:str, right:str, name:Optional[str]=None) -> str:
	relation = " ".join(clause)
	return "%s expected a value of type %s but got %s and %s" % (name or "Anonymous", relation, left, right)

def _unpack(validation_result):
	expected, value = validation_result[0], validation_result[1]
	actual_type = validation_result[2] if len(validation_result) > 2 else type(value).__name__
	return expected, value, actual_type
