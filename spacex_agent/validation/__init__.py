"""
Input validation module.

Declarative field specs and the contract check run before every handler.
"""
