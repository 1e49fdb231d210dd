"""Puzzle hunt domain services: session state machine, timers, submissions,
presence and scoring.

Routes and socket handlers call into these modules; they own every write to
the team record so transport code never mutates game state directly.
"""
