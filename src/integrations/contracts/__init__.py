"""
Contracts (data models).

This folder defines the request/response shapes for external collaborators:
- Checkout session request/response formats
- The lead sink interface

Both mock and real clients implement these contracts.
"""
