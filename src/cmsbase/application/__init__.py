"""Application layer for cmsbase."""
