"""Import pipeline: validation, entity creation and the batch orchestrator."""

from mass_import.pipeline.entity_pipeline import EntityCreationPipeline
from mass_import.pipeline.orchestrator import BatchImportOrchestrator
from mass_import.pipeline.validation import validate_record

__all__ = ["BatchImportOrchestrator", "EntityCreationPipeline", "validate_record"]
