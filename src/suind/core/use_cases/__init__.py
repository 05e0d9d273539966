from .dispatch import Dispatcher, DispatchOutcome
from .ingest import EngineState, IngestionEngine

__all__ = ["Dispatcher", "DispatchOutcome", "EngineState", "IngestionEngine"]
