"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that every route uses
(settings, the store contract and its backends). Keep route-specific
envelope handling in the corresponding feature package (e.g. `records/`).
"""
