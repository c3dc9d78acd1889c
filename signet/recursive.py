"""
Types for self-similar data: lists, trees, and graphs in general.

The caller supplies two things: a node type, which every vertex must satisfy,
and an iterator factory, which lists a vertex's children. The walk keeps its
own work-list instead of recursing, so deep structures do not exhaust the stack,
and it visits each vertex once, so cyclic structures do not loop forever.
"""
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional
from .lattice import Lattice
from .syntax import UNDEFINED

IteratorFactory = Callable[[Any], Iterable]

def _present(value) -> bool:
	return value is not None and value is not UNDEFINED

def iterate_on(key:str) -> IteratorFactory:
	""" Children live under one property: either a single child, or a list of them. """
	def iterator_factory(value) -> Iterable:
		if isinstance(value, Mapping):
			child = value.get(key, UNDEFINED)
		else:
			child = getattr(value, key, UNDEFINED)
		if isinstance(child, (list, tuple)):
			return iterate_on_array(child)
		return iterate_on_array([child])
	return iterator_factory

def iterate_on_array(values:Iterable) -> Iterable:
	""" Yields the values in order, stopping at the first one that is absent. """
	for value in list(values):
		if not _present(value):
			return
		yield value

def recursive_type_factory(is_node:Callable[[Any], bool], iterator_factory:IteratorFactory) -> Callable[[Any], bool]:
	def check(value) -> bool:
		pending, seen = [value], {}
		while pending:
			vertex = pending.pop()
			if id(vertex) in seen:
				continue
			seen[id(vertex)] = vertex
			if not is_node(vertex):
				return False
			for child in iterator_factory(vertex):
				if not _present(child):
					break
				pending.append(child)
		return True
	return check

class RecursiveTypes:
	def __init__(self, lattice:Lattice):
		self.lattice = lattice

	def recursive_type_factory(self, iterator_factory:IteratorFactory, node_type) -> Callable[[Any], bool]:
		return recursive_type_factory(self.lattice.is_type_of(node_type), iterator_factory)

	def define_recursive_type(self, name:str, iterator_factory:IteratorFactory, node_type, preprocess:Optional[Callable]=None):
		self.lattice.define(name, self.recursive_type_factory(iterator_factory, node_type), preprocess)
