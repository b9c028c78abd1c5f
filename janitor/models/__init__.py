"""Data models for tracked resources and audit events."""
