"""Purge pipeline services: classifier, scope resolver, executor, hooks."""
