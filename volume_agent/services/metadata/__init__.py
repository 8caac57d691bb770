from .metadata_store import MetadataStore

__all__ = ["MetadataStore"]
