# src/chainforensics/graph/__init__.py
from .index import Edge, EdgeList, GraphIndex

__all__ = ['Edge', 'EdgeList', 'GraphIndex']
