"""Service layer: the steps of the publish pipeline."""
