from .indexer import IndexerOutput, provision_store, run_indexer, run_ingestion

__all__ = ["IndexerOutput", "provision_store", "run_indexer", "run_ingestion"]
