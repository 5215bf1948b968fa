"""Output artifact serialization."""

from .writer import ArtifactPaths, fields_to_frame, write_artifacts

__all__ = ["ArtifactPaths", "fields_to_frame", "write_artifacts"]
