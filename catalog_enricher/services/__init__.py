"""Business logic services for the catalog enrichment pipeline.

Available Services:
    - classification: supplier / tool-type classification
    - extraction: unit normalizer, HTML heuristics, part-number decoder
    - suppliers: per-supplier resolution strategies and registry
    - retry: retry/timeout envelope around one resolution
    - orchestrator: bounded-concurrency resolution of a record set
    - job_store: in-memory job registry
    - tabular: spreadsheet import/export
"""
