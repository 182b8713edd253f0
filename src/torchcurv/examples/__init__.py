"""Procedural sample meshes."""
