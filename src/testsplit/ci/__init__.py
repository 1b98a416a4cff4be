"""CI provider integration."""

from testsplit.ci.artifacts import ArtifactFetchError, CircleCIArtifactProvider, artifacts_url

__all__ = ["ArtifactFetchError", "CircleCIArtifactProvider", "artifacts_url"]
