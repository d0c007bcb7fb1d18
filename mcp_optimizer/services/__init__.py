"""Stateful services: report store, stream sessions, browser launcher."""
