"""Meemo: multi-tenant file storage service."""
