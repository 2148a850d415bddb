"""Shared configuration, settings, types and errors."""
