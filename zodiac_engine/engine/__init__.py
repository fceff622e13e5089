"""Compatibility scoring and team composition engine.

Sub-modules:
- matrix          – frozen 12×12 compatibility table + initialization barrier
- pair_scorer     – symmetric sign-pair lookup
- element_balance – elemental coverage & diversity
- conflicts       – high conflict-potential pair detection
- team_score      – group-level aggregation
- team_builder    – greedy-plus-repair team selection
- optimizer       – add / remove / swap suggestions
- recommendations – team insights and suggestions
"""
