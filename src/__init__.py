"""
Observation Harvest - cursor-paginated collection of public observation records

Modules:
- observations: id_above pagination, flattening + date fields, idempotent tasks, Typer CLI
"""
