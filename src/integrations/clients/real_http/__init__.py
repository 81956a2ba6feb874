"""
Real integration clients.

These clients talk to the real payment provider. They implement the same
contracts as the mock clients; selection happens in src/api/main.py only.
"""
