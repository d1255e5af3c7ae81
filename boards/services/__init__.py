"""
Services for the boards application.

- source_tier.py: SourceTier trust ranking
- coalescer.py: batch Coalescing Engine
- spec_resolution.py: per-field resolution and consensus
- spec_tracker.py: spec_sources provenance log and spec cache
- ingestion.py: incremental manufacturer spec ingestion
- persistence.py: runs, boards and listings in referential order
- filters.py: ability and listing filters
- fetch_scheduler.py: bounded fetch fan-out and lookup cache
- key_audit.py: near-duplicate key report
"""
