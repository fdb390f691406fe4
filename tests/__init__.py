"""
Observation Harvest Test Suite

Tests organized by module under tests/observations/:
- test_collector.py - cursor loop termination, ordering, no duplicates
- test_client.py - single-page fetch and error mapping (mocked HTTP)
- test_models.py - query/record/page shapes
- test_prepare.py - flattening and derived date fields
- test_validate.py - result-set integrity gates
- test_tasks.py - ingest/prepare pipeline on a tmp data dir
- test_config.py / test_cli.py - env loading and Typer entry point
"""
