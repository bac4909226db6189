"""Mutation services: each function authorizes, applies and hydrates."""
