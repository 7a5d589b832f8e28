"""Publishing artifacts to GitHub Releases."""
