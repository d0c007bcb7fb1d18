"""Audit engine, orchestration and MCP tools."""
