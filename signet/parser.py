"""
Turns type-expression text and signature text into parse-records.

The grammar is small enough that a hand-written scanner serves better than
a generated one, but it has one wrinkle worth knowing about:
Angle brackets do double duty. They delimit type arguments, as in "array<int>",
but the dependent-type clauses use "<" and ">" as relational operators, as in
"A < B :: A:int, B:int => boolean". So the scanner decides, character by character:

* A "<" opens type arguments only when it is attached to the name before it.
* A ">" closes type arguments unless it belongs to a free-standing operator:
  a run of operator characters with whitespace on both sides and an operand after.
* "=>" is always an arrow.
* "%" escapes whatever follows, so "%;" is a semicolon that does not separate.

Having labelled every character with its depth and role, the rest is just
splitting at the right separators at depth zero.
"""
import re
from typing import NamedTuple, Optional
from .errors import ParseError
from .macros import MacroEngine
from .syntax import TypeRecord, DependentClause, Stage, Signature

NAME = re.compile(r"[^()<>\[\]:;=,\s]+")

TEXT, ESCAPE, LITERAL, OPEN, CLOSE, ARROW = range(6)
OPERATOR_CHARS = frozenset("<>=!:#")
DETACHED = frozenset(",;([") | OPERATOR_CHARS

class Cell(NamedTuple):
	char: str
	depth: int
	role: int

def scan(text:str) -> list[Cell]:
	""" Label each character with its bracket depth and role. OPEN and CLOSE carry the outer depth. """
	cells = []
	depth, i, size = 0, 0, len(text)
	while i < size:
		char = text[i]
		if char == "%" and i + 1 < size:
			cells.append(Cell(char, depth, ESCAPE))
			cells.append(Cell(text[i+1], depth, LITERAL))
			i += 2
			continue
		if char == "=" and text[i+1:i+2] == ">":
			cells.append(Cell("=", depth, ARROW))
			cells.append(Cell(">", depth, ARROW))
			i += 2
			continue
		if char == "<" and _attached(text, i):
			cells.append(Cell(char, depth, OPEN))
			depth += 1
		elif char == ">" and depth and not _free_standing_operator(text, i):
			depth -= 1
			cells.append(Cell(char, depth, CLOSE))
		else:
			cells.append(Cell(char, depth, TEXT))
		i += 1
	if depth:
		raise ParseError(text, len(text), "Unbalanced angle brackets: %d left open." % depth)
	return cells

def _attached(text, i):
	return i > 0 and not text[i-1].isspace() and text[i-1] not in DETACHED

def _free_standing_operator(text, i):
	start, end = i, i + 1
	while start > 0 and text[start-1] in OPERATOR_CHARS: start -= 1
	while end < len(text) and text[end] in OPERATOR_CHARS: end += 1
	if start > 0 and not text[start-1].isspace(): return False
	rest = text[end:]
	operand = rest.lstrip()
	return len(operand) < len(rest) and operand[:1] not in ("", ",", ";", ">", "]", ")", "=")

def split(text:str, separators:str, keep_escapes=True) -> list[tuple[str, int]]:
	"""
	Split at depth-zero separators. Returns (piece, offset) pairs.
	With keep_escapes off, depth-zero escape marks are consumed, which is what
	the final consumer of a subtype argument wants.
	"""
	pieces, current, start = [], [], 0
	cells = scan(text)
	for index, cell in enumerate(cells):
		if cell.depth == 0 and cell.role == TEXT and cell.char in separators:
			pieces.append(("".join(current), start))
			current, start = [], index + 1
		elif cell.role == ESCAPE and cell.depth == 0 and not keep_escapes:
			pass
		else:
			current.append(cell.char)
	pieces.append(("".join(current), start))
	return pieces

def _split_arrows(text:str) -> list[tuple[str, int]]:
	pieces, start = [], 0
	cells = scan(text)
	index = 0
	while index < len(cells):
		cell = cells[index]
		if cell.role == ARROW and cell.depth == 0:
			pieces.append((text[start:index], start))
			start = index + 2
			index += 2
		else:
			index += 1
	pieces.append((text[start:], start))
	return pieces

def _find_clause_delimiter(text:str) -> int:
	cells = scan(text)
	for index in range(len(cells) - 1):
		a, b = cells[index], cells[index + 1]
		if a.depth == 0 and a.role == b.role == TEXT and a.char == b.char == ":":
			return index
	return -1

def _find_name_colon(text:str) -> int:
	for index, cell in enumerate(scan(text)):
		if cell.depth == 0 and cell.role == TEXT:
			if cell.char == ":": return index
			if cell.char == "[": return -1
	return -1

class Parser:
	def __init__(self, macros:Optional[MacroEngine]=None):
		self.macros = macros if macros is not None else MacroEngine()

	def parse_type(self, text:str) -> TypeRecord:
		if not isinstance(text, str):
			raise ParseError(repr(text), 0, "A type expression must be a string.")
		text = self.macros.expand_type(text.strip())
		name, text = self._name_prefix(text)
		optional = text.startswith("[") and text.endswith("]")
		if optional:
			text = text[1:-1].strip()
			if name is None:
				# The name may also sit inside the brackets, as in "[b:int]".
				name, text = self._name_prefix(text)
		base, subtype = self._base_and_arguments(text)
		return TypeRecord(name, base, subtype, optional)

	@staticmethod
	def _name_prefix(text:str) -> tuple[Optional[str], str]:
		colon = _find_name_colon(text)
		if colon < 0:
			return None, text
		name = text[:colon].strip()
		if not NAME.fullmatch(name):
			raise ParseError(text, 0, "This is not a usable argument name: %r" % name)
		return name, text[colon+1:].strip()

	def _base_and_arguments(self, text:str) -> tuple[str, tuple[str, ...]]:
		cells = scan(text)
		opener = next((i for i, cell in enumerate(cells) if cell.role == OPEN and cell.depth == 0), None)
		if opener is None:
			base, subtype = text.strip(), ()
		else:
			closer = next(i for i, cell in enumerate(cells) if cell.role == CLOSE and cell.depth == 0)
			if text[closer+1:].strip():
				raise ParseError(text, closer+1, "Unexpected text after the type arguments.")
			base = text[:opener].strip()
			subtype = self._arguments(text[opener+1:closer])
		if not base:
			raise ParseError(text, 0, "Expected a type name here.")
		if not NAME.fullmatch(base):
			raise ParseError(text, 0, "Not a valid type name: %r. (Type arguments must follow the name directly.)" % base)
		return base, subtype

	@staticmethod
	def _arguments(text:str) -> tuple[str, ...]:
		if not text.strip():
			return ()
		arguments = []
		for piece, offset in split(text, ";,", keep_escapes=False):
			piece = piece.strip()
			if not piece:
				raise ParseError(text, offset, "Empty type argument.")
			arguments.append(piece)
		return tuple(arguments)

	def parse_signature(self, text:str) -> Signature:
		if not isinstance(text, str):
			raise ParseError(repr(text), 0, "A signature must be a string.")
		text = self.macros.expand_signature(text)
		stages = []
		for piece, offset in _split_arrows(text):
			if not piece.strip():
				raise ParseError(text, offset, "Empty stage in signature.")
			stages.append(self.parse_stage(piece))
		return Signature(stages)

	def parse_stage(self, text:str) -> Stage:
		delimiter = _find_clause_delimiter(text)
		if delimiter < 0:
			clauses, type_text = (), text
		else:
			clauses = self._clauses(text[:delimiter])
			type_text = text[delimiter+2:]
		types = []
		for piece, offset in split(type_text, ","):
			if not piece.strip():
				raise ParseError(type_text, offset, "Expected a type here.")
			types.append(self.parse_type(piece))
		stage = Stage(types, clauses)
		for clause in clauses:
			if stage.record_named(clause.left) is None:
				raise ParseError(text, 0, "The relation %r refers to %r, which no argument here is named." % (" ".join(clause), clause.left))
		return stage

	@staticmethod
	def _clauses(text:str) -> tuple[DependentClause, ...]:
		clauses = []
		for piece, offset in split(text, ","):
			words = piece.split()
			if len(words) != 3:
				raise ParseError(text, offset, "A dependent relation reads 'left operator right'.")
			clauses.append(DependentClause(*words))
		return tuple(clauses)
