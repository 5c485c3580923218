"""Location-based cat and mouse game server.

Game state lives in an in-process store; FastAPI routes are thin wrappers around it.
"""
