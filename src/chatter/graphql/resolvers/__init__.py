"""Resolver package for the GraphQL schema.

The strawberry types, queries, mutations and subscriptions import these
functions lazily; each one opens its own database session.
"""
