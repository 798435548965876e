"""Kanban API: projects, ordered and filtered sections, items, tags and project roles."""
