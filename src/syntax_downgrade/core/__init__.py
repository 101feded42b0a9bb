"""
Core Package.

Contains the downgrade machinery:
- AST node and token models
- Token-adjacency analysis and fresh-identifier allocation
- Rule contract, rule catalog and dispatcher
- Orchestration engine and tracer
"""
