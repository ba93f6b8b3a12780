"""Question catalog and leaderboard log.

The coordinator only needs two things from storage: a random question set
from a named pool, and an append-only leaderboard write when a match ends.
"""
