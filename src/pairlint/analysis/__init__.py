"""
Static Analysis Package.

LibCST visitors that give Python source the static facts the core needs.

Modules:
    - ``symbol_table``: Symbols, scopes and annotation resolution.
    - ``expressions``: Constant / static type classification of expressions.
    - ``indexer``: First pass recording module-level declarations.
    - ``call_sites``: Second pass producing call-site descriptors.
"""
