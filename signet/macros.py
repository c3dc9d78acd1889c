"""
Text-to-text rewrites that run before the parser proper.

There are two lists of rules: type-level rules see one type expression at a time,
and signature-level rules see a whole signature before it gets split into stages.
Rules apply in the order registered, each seeing the previous rule's output.
Registration is monotonic: there is no way to take a rule back.
"""
import re
from typing import Callable
from .errors import MacroError

Macro = Callable[[str], str]

class MacroEngine:
	def __init__(self):
		self._type_level: list[Macro] = []
		self._signature_level: list[Macro] = []

	def register_type_level_macro(self, macro:Macro):
		self._type_level.append(_check_callable(macro))

	def register_signature_level_macro(self, macro:Macro):
		self._signature_level.append(_check_callable(macro))

	def expand_type(self, text:str) -> str:
		return _apply(self._type_level, text)

	def expand_signature(self, text:str) -> str:
		return _apply(self._signature_level, text)

def _check_callable(macro):
	if not callable(macro):
		raise MacroError("A macro must be callable, but got %r" % (macro,))
	return macro

def _apply(rules, text):
	for rule in rules:
		result = rule(text)
		if not isinstance(result, str):
			name = getattr(rule, "__name__", repr(rule))
			raise MacroError("Macro %s returned %r where a string was expected." % (name, result))
		text = result
	return text

###############################################################################
#  The standard rules. The catalog installs these.

def _type_pattern(core:str):
	# Optional "name:" prefix, optional [...] brackets, then the shorthand itself.
	return re.compile(r"([^:<>\[\]]+:)?(\[)?" + core + r"(\])?")

_BANG_STAR = _type_pattern(r"(!\*)")
_QUESTION = _type_pattern(r"\?([^\]]*)")
_CARET = _type_pattern(r"\^([^\]]*)")
_EMPTY_PARENS = re.compile(r"\(\s*\)")

def _rewrite(pattern, replace, value):
	match = pattern.fullmatch(value)
	if match is None:
		return value
	prefix, opener, core, closer = match.groups()
	return (prefix or "") + (opener or "") + replace(core.strip()) + (closer or "")

def empty_parens_to_star(value:str) -> str:
	return "*" if _EMPTY_PARENS.fullmatch(value.strip()) else value

def bang_star_to_defined(value:str) -> str:
	return _rewrite(_BANG_STAR, lambda core: "not<variant<undefined, null>>", value.strip())

def question_mark_to_optional(value:str) -> str:
	return _rewrite(_QUESTION, lambda core: "variant<undefined, null, %s>" % core, value.strip())

def caret_to_not(value:str) -> str:
	return _rewrite(_CARET, lambda core: "not<%s>" % core, value.strip())

def parenthesized_signature_to_function(value:str) -> str:
	"""
	Every balanced "( ... => ... )" group becomes "function<...>", innermost ones included.
	Parentheses without an arrow directly inside (regular expressions, mostly) stay put.
	"""
	out, stack, escaped = [], [], False
	for char in value:
		if escaped:
			out.append(char)
			escaped = False
		elif char == "%":
			out.append(char)
			escaped = True
		elif char == "(":
			stack.append(len(out))
			out.append(char)
		elif char == ")" and stack:
			start = stack.pop()
			inner = "".join(out[start+1:])
			if _has_arrow(inner):
				del out[start:]
				out.append("function<" + inner + ">")
			else:
				out.append(char)
		else:
			out.append(char)
	return "".join(out)

def _has_arrow(text:str) -> bool:
	depth = 0
	for i, char in enumerate(text):
		if char in "(<": depth += 1
		elif char in ")>" and depth and text[i-1:i] != "=": depth -= 1
		elif char == "=" and text[i+1:i+2] == ">" and depth == 0: return True
	return False

def install_standard_macros(engine:MacroEngine):
	engine.register_type_level_macro(empty_parens_to_star)
	engine.register_type_level_macro(bang_star_to_defined)
	engine.register_type_level_macro(question_mark_to_optional)
	engine.register_type_level_macro(caret_to_not)
	engine.register_signature_level_macro(parenthesized_signature_to_function)
