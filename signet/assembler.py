"""
Parse-records back into canonical text.
Assembling then parsing gives back the same records, so the text is a fair identity for a signature.
"""
from boozetools.support.foundation import Visitor
from .errors import ParseError
from .parser import scan, ESCAPE, LITERAL, TEXT
from .syntax import TypeRecord, Stage, Signature

class Assembler(Visitor):
	def visit_TypeRecord(self, record:TypeRecord) -> str:
		text = record.type
		if record.subtype:
			text += "<" + ";".join(map(escape_argument, record.subtype)) + ">"
		if record.optional:
			text = "[" + text + "]"
		if record.name is not None:
			text = record.name + ":" + text
		return text

	def visit_DependentClause(self, clause) -> str:
		return " ".join(clause)

	def visit_Stage(self, stage:Stage) -> str:
		text = ", ".join(self.visit(record) for record in stage.types)
		if stage.dependent:
			text = ", ".join(self.visit(clause) for clause in stage.dependent) + " :: " + text
		return text

	def visit_Signature(self, signature:Signature) -> str:
		return " => ".join(self.visit(stage) for stage in signature.stages)

def escape_argument(argument:str) -> str:
	""" Put back the escape marks the parser consumed, so separators in literals stay literal. """
	try: cells = scan(argument)
	except ParseError:
		# Stray brackets that arrived escaped. Escape everything structural.
		return "".join("%"+c if c in ";,%<>" else c for c in argument)
	out = []
	for cell in cells:
		if cell.depth == 0 and cell.role == ESCAPE:
			out.append("%%")
		elif cell.depth == 0 and cell.role in (TEXT, LITERAL) and cell.char in ";,":
			out.append("%" + cell.char)
		else:
			out.append(cell.char)
	return "".join(out)

_assembler = Assembler()

def assemble_type(record:TypeRecord) -> str: return _assembler.visit(record)
def assemble_signature(signature:Signature) -> str: return _assembler.visit(signature)
