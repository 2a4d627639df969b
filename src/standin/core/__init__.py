"""Core resolver layer shared by every backend.

Builds the resolvers behind entity, field list and field item doubles and
the chain that orders overrides, core resolvers and guardrails. Depends on
the domain layer only; never imports a backend.
"""
